"""
Model: Review, UserReviewSentiment
"""

from db import db, now_utc


def empty_interaction_counts():
    return {"helpful": 0, "unhelpful": 0, "funny": 0}


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.String, primary_key=True)
    resource_id = db.Column(db.String, db.ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = db.Column(db.String, db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    resource_version = db.Column(db.String)
    is_recommended = db.Column(db.Boolean, nullable=False)
    comment = db.Column(db.Text)
    interaction_counts = db.Column(db.JSON, default=empty_interaction_counts)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    author = db.relationship("Profile")
    sentiments = db.relationship("UserReviewSentiment", backref="review", cascade="all, delete")

    __table_args__ = (db.UniqueConstraint("resource_id", "author_id", name="uq_reviews_resource_author"),)

    def to_dict(self):
        return {
            "id": self.id,
            "resourceId": self.resource_id,
            "authorId": self.author_id,
            "resourceVersion": self.resource_version,
            "isRecommended": bool(self.is_recommended),
            "comment": self.comment,
            "interactionCounts": self.interaction_counts or empty_interaction_counts(),
            "author": self.author.to_author_dict() if self.author else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class UserReviewSentiment(db.Model):
    __tablename__ = "user_review_sentiments"

    user_id = db.Column(db.String, db.ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    review_id = db.Column(db.String, db.ForeignKey("reviews.id", ondelete="CASCADE"), primary_key=True)
    sentiment = db.Column(db.String(20))  # helpful, unhelpful or NULL
    is_funny = db.Column(db.Boolean, default=False)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)
