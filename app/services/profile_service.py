"""
Public profile pages and self-service profile edits.
"""
import logging

from db import db, transaction
from exceptions import NotFoundException, ValidationException
from repositories.profile_repository import ProfileRepository
from repositories.resource_repository import ResourceRepository
from repositories.review_repository import ReviewRepository
from services.access import require_user
from services.resource_service import serialize_resource
from settings import load_settings

logger = logging.getLogger("main")

PROFILE_FIELDS = {
    "name": "name",
    "bio": "bio",
    "avatarUrl": "avatar_url",
    "bannerUrl": "banner_url",
    "socialLinks": "social_links",
}


class ProfileService:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.profiles = ProfileRepository(self.session)
        self.resources = ResourceRepository(self.session)
        self.reviews = ReviewRepository(self.session)

    def get_by_usertag(self, usertag):
        profile = self.profiles.get_by_usertag(usertag)
        if profile is None:
            raise NotFoundException("Profile not found.")
        return profile

    def user_stats(self, profile_id):
        """
        overallResourceRating is the review-count weighted mean over the
        author's published, reviewed resources.
        """
        rated = self.resources.get_rated_for_author(profile_id)
        review_total = sum(resource.review_count for resource in rated)
        overall = None
        if review_total:
            overall = sum(resource.rating * resource.review_count for resource in rated) / review_total
        return {
            "totalResources": self.resources.count_published_for_author(profile_id),
            "totalReviews": self.reviews.count_by_author(profile_id),
            "overallResourceRating": overall,
            "overallResourceReviewCount": review_total,
            "followersCount": 0,
        }

    def top_resources(self, profile_id, count=None):
        if count is None:
            count = load_settings()["listing"]["top_resources"]
        top = []
        for rank, resource in enumerate(self.resources.get_top_for_author(profile_id, count=count), start=1):
            data = serialize_resource(resource)
            data["rank"] = rank
            top.append(data)
        return top

    def published_resources(self, profile_id, sort_by="created_at", order="DESC", limit=None, exclude_ids=None):
        return [
            serialize_resource(resource)
            for resource in self.resources.get_published_for_author(
                profile_id, sort_by=sort_by, order=order, limit=limit, exclude_ids=exclude_ids
            )
        ]

    def profile_page(self, usertag):
        profile = self.get_by_usertag(usertag)
        top = self.top_resources(profile.id)
        return {
            "profile": profile.to_dict(),
            "stats": self.user_stats(profile.id),
            "topResources": top,
            "resources": self.published_resources(profile.id, exclude_ids=[resource["id"] for resource in top]),
        }

    def update_own_profile(self, actor, data):
        require_user(actor)
        if "name" in data and not (data.get("name") or "").strip():
            raise ValidationException("Name cannot be empty.")
        if "socialLinks" in data and data["socialLinks"] is not None and not isinstance(data["socialLinks"], dict):
            raise ValidationException("socialLinks must be an object.")

        with transaction(self.session):
            for key, attribute in PROFILE_FIELDS.items():
                if key in data:
                    value = data[key]
                    setattr(actor, attribute, value.strip() if key == "name" else value)

        logger.info(f"Profile {actor.id} updated")
        return actor
