"""
Services package

Business rules and transactions. Each service takes an optional session
(default db.session) and hands it to its repositories.
"""
