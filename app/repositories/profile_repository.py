"""
Repository for Profile database operations
"""

from sqlalchemy import func, or_
from db import db
from models import Profile


def normalize_usertag(usertag):
    usertag = (usertag or "").strip()
    return usertag if usertag.startswith("@") else f"@{usertag}"


class ProfileRepository:
    """Repository for Profile database operations"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_id(self, id):
        """Get Profile by ID"""
        return self.session.get(Profile, id)

    def get_by_usertag(self, usertag):
        """Get Profile by usertag, with or without the leading @"""
        return self.session.query(Profile).filter(Profile.usertag == normalize_usertag(usertag)).first()

    def search(self, query, limit=10):
        """Case-insensitive match on name or usertag"""
        pattern = f"%{(query or '').strip().lower()}%"
        return (
            self.session.query(Profile)
            .filter(or_(func.lower(Profile.name).like(pattern), func.lower(Profile.usertag).like(pattern)))
            .order_by(Profile.name)
            .limit(limit)
            .all()
        )

    def create(self, **kwargs):
        """Create new Profile record"""
        item = Profile(**kwargs)
        self.session.add(item)
        self.session.flush()
        return item
