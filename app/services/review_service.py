"""
Reviews, their aggregates on the resource, and per-user interactions.
"""
import logging

from constants import INTERACTION_FUNNY, REVIEW_INTERACTIONS
from db import db, transaction
from exceptions import (
    AlreadyReviewedException,
    AuthorizationException,
    NotAuthorException,
    NotFoundException,
    ValidationException,
)
from models import Review, UserReviewSentiment
from repositories.resource_repository import ResourceRepository
from repositories.review_repository import ReviewRepository
from services.access import require_user
from utils import generate_id

logger = logging.getLogger("main")


def _review_fields(data):
    if not isinstance(data.get("isRecommended"), bool):
        raise ValidationException("isRecommended must be true or false.")
    comment = (data.get("comment") or "").strip()
    if not comment:
        raise ValidationException("A review needs a comment.")
    return data.get("resourceVersion"), data["isRecommended"], comment


class ReviewService:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.reviews = ReviewRepository(self.session)
        self.resources = ResourceRepository(self.session)

    def _refresh_aggregates(self, resource):
        """rating is the positive share mapped onto 0..5; both are NULL without reviews."""
        total, positives = self.reviews.recommendation_totals(resource.id)
        resource.review_count = total
        if total:
            resource.positive_review_percentage = positives / total * 100
            resource.rating = resource.positive_review_percentage / 100 * 5
        else:
            resource.positive_review_percentage = None
            resource.rating = None

    def _own_review(self, actor, review_id, verb):
        require_user(actor)
        review = self.reviews.get_by_id(review_id)
        if review is None:
            raise NotFoundException("Review not found.")
        if review.author_id != actor.id:
            raise AuthorizationException(f"You are not authorized to {verb} this review.")
        return review

    def add_review(self, actor, resource_id, data):
        require_user(actor)
        resource = self.resources.get_by_id(resource_id)
        if resource is None:
            raise NotFoundException("Resource not found.")
        if resource.author_id == actor.id:
            raise NotAuthorException("You cannot review your own resource.")
        if self.reviews.get_for_author(resource.id, actor.id) is not None:
            raise AlreadyReviewedException()
        version, recommended, comment = _review_fields(data)

        with transaction(self.session):
            review = Review(
                id=generate_id("rev"),
                resource_id=resource.id,
                author_id=actor.id,
                resource_version=version,
                is_recommended=recommended,
                comment=comment,
            )
            self.reviews.add(review)
            self._refresh_aggregates(resource)

        logger.info(f"Review {review.id} added on {resource.id} by {actor.id}")
        return review

    def update_review(self, actor, review_id, data):
        review = self._own_review(actor, review_id, "edit")
        version, recommended, comment = _review_fields(data)
        with transaction(self.session):
            review.resource_version = version
            review.is_recommended = recommended
            review.comment = comment
            self.session.flush()
            self._refresh_aggregates(review.resource)
        return review

    def delete_review(self, actor, review_id):
        review = self._own_review(actor, review_id, "delete")
        resource = review.resource
        with transaction(self.session):
            self.reviews.delete(review)
            self._refresh_aggregates(resource)
        return resource

    def toggle_interaction(self, actor, review_id, interaction):
        """
        helpful and unhelpful are exclusive toggles, funny toggles on its own.
        The row disappears once it carries nothing.
        """
        require_user(actor)
        if interaction not in REVIEW_INTERACTIONS:
            raise ValidationException(f"Unknown interaction '{interaction}'.")
        review = self.reviews.get_by_id(review_id)
        if review is None:
            raise NotFoundException("Review not found.")

        with transaction(self.session):
            row = self.reviews.get_sentiment(actor.id, review.id)
            sentiment = row.sentiment if row else None
            is_funny = bool(row.is_funny) if row else False

            if interaction == INTERACTION_FUNNY:
                is_funny = not is_funny
            else:
                sentiment = None if sentiment == interaction else interaction

            if sentiment is None and not is_funny:
                if row is not None:
                    self.session.delete(row)
            elif row is None:
                self.session.add(
                    UserReviewSentiment(user_id=actor.id, review_id=review.id, sentiment=sentiment, is_funny=is_funny)
                )
            else:
                row.sentiment = sentiment
                row.is_funny = is_funny
            self.session.flush()

            counts = self.reviews.interaction_counts(review.id)
            review.interaction_counts = counts

        return {
            "updatedCounts": counts,
            "currentUserSentiment": sentiment,
            "currentUserIsFunny": is_funny,
        }

    def get_user_sentiment(self, actor, review_id):
        """Anonymous callers simply have no sentiment."""
        if actor is None or not getattr(actor, "is_authenticated", False):
            return {"sentiment": None, "isFunny": False}
        row = self.reviews.get_sentiment(actor.id, review_id)
        if row is None:
            return {"sentiment": None, "isFunny": False}
        return {"sentiment": row.sentiment, "isFunny": bool(row.is_funny)}
