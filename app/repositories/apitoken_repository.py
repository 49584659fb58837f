"""
Repository for ApiToken database operations
"""

from db import db
from models import ApiToken


class ApiTokenRepository:
    """Repository for ApiToken database operations"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_token(self, token):
        """Get ApiToken by its secret value"""
        return self.session.query(ApiToken).filter_by(token=token).first()

    def list_for_profile(self, profile_id):
        return self.session.query(ApiToken).filter_by(profile_id=profile_id).order_by(ApiToken.created_at.desc()).all()

    def create(self, **kwargs):
        """Create new ApiToken record"""
        item = ApiToken(**kwargs)
        self.session.add(item)
        self.session.flush()
        return item

    def delete(self, id, profile_id):
        """Delete a token owned by profile_id"""
        item = self.session.query(ApiToken).filter_by(id=id, profile_id=profile_id).first()
        if not item:
            return False
        self.session.delete(item)
        return True
