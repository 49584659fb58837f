"""
Review Routes - reviews and helpful/unhelpful/funny interactions
"""

from flask import Blueprint, request
from api_responses import handle_action_errors, success_response
from auth import current_actor
from services.review_service import ReviewService

reviews_bp = Blueprint("reviews", __name__, url_prefix="/api")


def _json():
    return request.get_json(silent=True) or {}


@reviews_bp.route("/resources/<resource_id>/reviews", methods=["POST"])
@handle_action_errors
def add_review(resource_id):
    review = ReviewService().add_review(current_actor(), resource_id, _json())
    return success_response({"reviewId": review.id}, status_code=201)


@reviews_bp.route("/reviews/<review_id>", methods=["PUT"])
@handle_action_errors
def update_review(review_id):
    review = ReviewService().update_review(current_actor(), review_id, _json())
    return success_response({"reviewId": review.id})


@reviews_bp.route("/reviews/<review_id>", methods=["DELETE"])
@handle_action_errors
def delete_review(review_id):
    ReviewService().delete_review(current_actor(), review_id)
    return success_response()


@reviews_bp.route("/reviews/<review_id>/interactions", methods=["POST"])
@handle_action_errors
def toggle_interaction(review_id):
    result = ReviewService().toggle_interaction(current_actor(), review_id, _json().get("interaction"))
    return success_response(result)


@reviews_bp.route("/reviews/<review_id>/sentiment", methods=["GET"])
@handle_action_errors
def get_sentiment(review_id):
    return success_response(ReviewService().get_user_sentiment(current_actor(), review_id))
