"""
Model: Profile
Application user. The role stored here is the only source of authorization.
"""

from db import db, now_utc
from flask_login import UserMixin
from constants import ROLE_USER, ROLE_VIP, ROLE_ADMIN, ROLE_MOD, STAFF_ROLES


class Profile(UserMixin, db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.String, primary_key=True)
    name = db.Column(db.String, nullable=False)
    usertag = db.Column(db.String, unique=True, nullable=False, index=True)  # stored with leading "@"
    password = db.Column(db.String(255))
    avatar_url = db.Column(db.String)
    banner_url = db.Column(db.String)
    bio = db.Column(db.Text)
    role = db.Column(db.String(20), default=ROLE_USER, nullable=False)
    social_links = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    @property
    def is_staff(self):
        return self.role in STAFF_ROLES

    def has_access(self, access):
        if access == ROLE_ADMIN:
            return self.is_admin
        elif access == ROLE_MOD:
            return self.is_staff
        elif access == ROLE_VIP:
            return self.role in (ROLE_VIP, ROLE_MOD, ROLE_ADMIN)
        # Any signed-in profile
        return True

    def badges(self):
        badges = []
        if self.role == ROLE_ADMIN:
            badges.append({"id": "badge-admin", "name": "Admin", "icon": "ShieldCheck"})
        if self.role == ROLE_MOD:
            badges.append({"id": "badge-mod", "name": "Moderator", "icon": "Shield"})
        badges.append({"id": "badge-verified", "name": "Verified", "icon": "CheckCircle"})
        return badges

    def to_author_dict(self):
        """Short form embedded in resources and reviews."""
        return {
            "id": self.id,
            "name": self.name,
            "usertag": self.usertag,
            "avatarUrl": self.avatar_url,
            "role": self.role,
        }

    def to_dict(self):
        data = self.to_author_dict()
        data.update(
            {
                "bannerUrl": self.banner_url,
                "bio": self.bio,
                "socialLinks": self.social_links,
                "badges": self.badges(),
                "createdAt": self.created_at.isoformat() if self.created_at else None,
                "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            }
        )
        return data
