"""
Admin Routes - projects, categories, tag groups and the section tag pool
"""

from flask import Blueprint, request
from api_responses import handle_action_errors, success_response
from auth import current_actor
from services.category_service import CategoryService
from services.project_service import ProjectService

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


def _json():
    return request.get_json(silent=True) or {}


# --- projects ---


@admin_bp.route("/projects", methods=["GET"])
@handle_action_errors
def list_projects():
    """All projects, any status"""
    return success_response(ProjectService().list_all(current_actor()))


@admin_bp.route("/projects", methods=["POST"])
@handle_action_errors
def create_project():
    project = ProjectService().create_project(current_actor(), _json())
    return success_response(project.to_dict(), status_code=201)


@admin_bp.route("/projects/<project_id>", methods=["PUT"])
@handle_action_errors
def update_project(project_id):
    project = ProjectService().update_project(current_actor(), project_id, _json())
    return success_response(project.to_dict())


@admin_bp.route("/projects/<project_id>", methods=["DELETE"])
@handle_action_errors
def delete_project(project_id):
    ProjectService().delete_project(current_actor(), project_id)
    return success_response()


# --- categories ---


@admin_bp.route("/projects/<project_id>/categories", methods=["GET"])
@handle_action_errors
def list_categories(project_id):
    return success_response([category.to_dict() for category in CategoryService().list_categories(current_actor(), project_id)])


@admin_bp.route("/projects/<project_id>/categories", methods=["POST"])
@handle_action_errors
def create_category(project_id):
    category, paths = CategoryService().create_category(current_actor(), project_id, _json())
    return success_response({"category": category.to_dict(), "revalidatePaths": paths}, status_code=201)


@admin_bp.route("/projects/<project_id>/categories/reorder", methods=["POST"])
@handle_action_errors
def reorder_categories(project_id):
    paths = CategoryService().reorder_categories(current_actor(), project_id, _json().get("orderedCategoryIds"))
    return success_response({"revalidatePaths": paths})


@admin_bp.route("/projects/<project_id>/tag-group-sources", methods=["GET"])
@handle_action_errors
def list_tag_group_sources(project_id):
    """Every tag group of every category of the project, for the import picker"""
    sources = CategoryService().list_group_sources(current_actor(), project_id)
    return success_response([source.to_dict() for source in sources])


@admin_bp.route("/categories/<category_id>", methods=["PUT"])
@handle_action_errors
def update_category(category_id):
    category, paths = CategoryService().update_category(current_actor(), category_id, _json())
    return success_response({"category": category.to_dict(), "revalidatePaths": paths})


@admin_bp.route("/categories/<category_id>", methods=["DELETE"])
@handle_action_errors
def delete_category(category_id):
    paths = CategoryService().delete_category(current_actor(), category_id)
    return success_response({"revalidatePaths": paths})


@admin_bp.route("/categories/<category_id>/tag-groups", methods=["PUT"])
@handle_action_errors
def save_tag_groups(category_id):
    category, paths = CategoryService().save_tag_groups(current_actor(), category_id, _json().get("tagGroupConfigs"))
    return success_response({"category": category.to_dict(), "revalidatePaths": paths})


@admin_bp.route("/categories/<category_id>/tag-groups/import", methods=["POST"])
@handle_action_errors
def import_tag_group(category_id):
    data = _json()
    category = CategoryService().import_tag_group(
        current_actor(), category_id, data.get("sourceCategoryId"), data.get("groupId")
    )
    return success_response(category.to_dict())


# --- section tags ---


@admin_bp.route("/section-tags", methods=["POST"])
@handle_action_errors
def create_section_tag():
    data = _json()
    tag = ProjectService().create_section_tag(
        current_actor(), data.get("itemType"), data.get("name"), data.get("description")
    )
    return success_response(tag.to_dict(), status_code=201)


@admin_bp.route("/section-tags/<tag_id>", methods=["PUT"])
@handle_action_errors
def update_section_tag(tag_id):
    data = _json()
    tag = ProjectService().update_section_tag(current_actor(), tag_id, data.get("name"), data.get("description"))
    return success_response(tag.to_dict())


@admin_bp.route("/section-tags/<tag_id>", methods=["DELETE"])
@handle_action_errors
def delete_section_tag(tag_id):
    ProjectService().delete_section_tag(current_actor(), tag_id)
    return success_response()
