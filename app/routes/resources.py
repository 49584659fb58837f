"""
Resource Routes - detail, save, delete, downloads and co-authors
"""

from flask import Blueprint, request
from api_responses import handle_action_errors, success_response
from auth import current_actor
from services.author_service import AuthorService
from services.resource_service import ResourceService, serialize_resource

resources_bp = Blueprint("resources", __name__, url_prefix="/api/resources")


def _json():
    return request.get_json(silent=True) or {}


@resources_bp.route("/<slug>", methods=["GET"])
@handle_action_errors
def get_resource(slug):
    """Resource page by slug, with reviews"""
    return success_response(ResourceService().get_resource_detail(slug))


@resources_bp.route("/<resource_id>/edit", methods=["GET"])
@handle_action_errors
def get_resource_for_edit(resource_id):
    return success_response(ResourceService().get_resource_for_edit(current_actor(), resource_id))


@resources_bp.route("", methods=["POST"])
@handle_action_errors
def create_resource():
    data = _json()
    resource, paths = ResourceService().save_resource(
        current_actor(), data, project_id=data.get("projectId"), category_id=data.get("categoryId")
    )
    return success_response({"resource": serialize_resource(resource), "revalidatePaths": paths}, status_code=201)


@resources_bp.route("/<resource_id>", methods=["PUT"])
@handle_action_errors
def update_resource(resource_id):
    resource, paths = ResourceService().save_resource(current_actor(), _json(), resource_id=resource_id)
    return success_response({"resource": serialize_resource(resource), "revalidatePaths": paths})


@resources_bp.route("/<resource_id>", methods=["DELETE"])
@handle_action_errors
def delete_resource(resource_id):
    paths = ResourceService().delete_resource(current_actor(), resource_id)
    return success_response({"revalidatePaths": paths})


@resources_bp.route("/<resource_id>/download", methods=["POST"])
@handle_action_errors
def download(resource_id):
    ResourceService().increment_download(resource_id, _json().get("fileId"))
    return success_response()


# --- co-authors ---


@resources_bp.route("/<resource_id>/authors", methods=["GET"])
@handle_action_errors
def list_authors(resource_id):
    return success_response(AuthorService().list_authors(resource_id))


@resources_bp.route("/<resource_id>/authors", methods=["POST"])
@handle_action_errors
def add_author(resource_id):
    data = _json()
    authors = AuthorService().add_author(current_actor(), resource_id, data.get("profileId"), data.get("roleDescription"))
    return success_response(authors, status_code=201)


@resources_bp.route("/<resource_id>/authors/<profile_id>", methods=["PUT"])
@handle_action_errors
def update_author(resource_id, profile_id):
    """Accepts roleDescription and/or authorColor"""
    data = _json()
    service = AuthorService()
    authors = None
    if "roleDescription" in data:
        authors = service.update_role(current_actor(), resource_id, profile_id, data["roleDescription"])
    if "authorColor" in data:
        authors = service.update_color(current_actor(), resource_id, profile_id, data["authorColor"])
    if authors is None:
        authors = service.list_authors(resource_id)
    return success_response(authors)


@resources_bp.route("/<resource_id>/authors/<profile_id>", methods=["DELETE"])
@handle_action_errors
def remove_author(resource_id, profile_id):
    return success_response(AuthorService().remove_author(current_actor(), resource_id, profile_id))


@resources_bp.route("/<resource_id>/transfer", methods=["POST"])
@handle_action_errors
def transfer_ownership(resource_id):
    authors = AuthorService().transfer_ownership(current_actor(), resource_id, _json().get("newCreatorId"))
    return success_response(authors)
