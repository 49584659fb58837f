"""
Profile Routes - public profile pages, profile search and self-service edits
"""

from flask import Blueprint, request
from api_responses import handle_action_errors, success_response
from auth import current_actor
from services.author_service import AuthorService
from services.profile_service import ProfileService

profiles_bp = Blueprint("profiles", __name__, url_prefix="/api/profiles")


@profiles_bp.route("/search", methods=["GET"])
@handle_action_errors
def search_profiles():
    """Profiles matching q by name or usertag (co-author picker)"""
    return success_response(
        AuthorService().search_profiles(current_actor(), request.args.get("q"), request.args.get("limit", 10, type=int))
    )


@profiles_bp.route("/me", methods=["PUT"])
@handle_action_errors
def update_me():
    profile = ProfileService().update_own_profile(current_actor(), request.get_json(silent=True) or {})
    return success_response(profile.to_dict())


@profiles_bp.route("/<usertag>", methods=["GET"])
@handle_action_errors
def get_profile(usertag):
    """Profile, stats, ranked top resources and the rest of the published resources"""
    return success_response(ProfileService().profile_page(usertag))


@profiles_bp.route("/<usertag>/resources", methods=["GET"])
@handle_action_errors
def get_profile_resources(usertag):
    service = ProfileService()
    profile = service.get_by_usertag(usertag)
    exclude = [resource_id for resource_id in request.args.get("exclude", "").split(",") if resource_id]
    return success_response(
        service.published_resources(
            profile.id,
            sort_by=request.args.get("sort", "created_at"),
            order=request.args.get("order", "DESC"),
            limit=request.args.get("limit", type=int),
            exclude_ids=exclude,
        )
    )
