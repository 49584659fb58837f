"""
Repositories package

Each repository wraps the queries for one aggregate and works on the session
it is given (defaults to the app-bound db.session). Repositories never
commit: the calling service owns the transaction.

Usage:
    from repositories.category_repository import CategoryRepository
    sources = CategoryRepository(session).list_all_group_sources(project_id)
"""
