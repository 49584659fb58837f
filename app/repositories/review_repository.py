"""
Repository for Review database operations
"""

from sqlalchemy import func
from db import db
from constants import SENTIMENT_HELPFUL, SENTIMENT_UNHELPFUL
from models import Review, UserReviewSentiment


class ReviewRepository:
    """Repository for Review and UserReviewSentiment database operations"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_id(self, id):
        """Get Review by ID"""
        return self.session.get(Review, id)

    def get_for_author(self, resource_id, author_id):
        return self.session.query(Review).filter_by(resource_id=resource_id, author_id=author_id).first()

    def count_by_author(self, author_id):
        return self.session.query(Review).filter_by(author_id=author_id).count()

    def recommendation_totals(self, resource_id):
        """(review count, recommended count) for a resource"""
        query = self.session.query(func.count(Review.id)).filter(Review.resource_id == resource_id)
        total = query.scalar()
        positives = query.filter(Review.is_recommended.is_(True)).scalar()
        return total or 0, positives or 0

    def add(self, review):
        self.session.add(review)
        self.session.flush()
        return review

    def delete(self, review):
        self.session.delete(review)
        self.session.flush()

    def get_sentiment(self, user_id, review_id):
        return self.session.get(UserReviewSentiment, (user_id, review_id))

    def interaction_counts(self, review_id):
        """Counts recomputed from the sentiment rows"""
        query = self.session.query(UserReviewSentiment).filter(UserReviewSentiment.review_id == review_id)
        return {
            "helpful": query.filter(UserReviewSentiment.sentiment == SENTIMENT_HELPFUL).count(),
            "unhelpful": query.filter(UserReviewSentiment.sentiment == SENTIMENT_UNHELPFUL).count(),
            "funny": query.filter(UserReviewSentiment.is_funny.is_(True)).count(),
        }
