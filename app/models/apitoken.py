"""
Model: ApiToken
Bearer tokens for non-browser clients.
"""

from db import db, now_utc


class ApiToken(db.Model):
    __tablename__ = "api_tokens"

    id = db.Column(db.Integer, primary_key=True)
    profile_id = db.Column(db.String, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=now_utc)
    last_used = db.Column(db.DateTime)

    profile = db.relationship("Profile", backref=db.backref("api_tokens", lazy=True, cascade="all, delete"))
