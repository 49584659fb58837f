"""
Catalog Routes - public browsing of projects, categories and resource listings
"""

from flask import Blueprint, request
from api_responses import handle_action_errors, paginated_response, success_response
from auth import current_actor
from services.category_service import CategoryService
from services.project_service import ProjectService
from services.resource_service import ResourceService
from settings import load_settings

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


def _is_staff(actor):
    return actor is not None and actor.is_staff


@catalog_bp.route("/projects", methods=["GET"])
@handle_action_errors
def list_projects():
    """Published projects of one item type, with categories and stats"""
    return success_response(ProjectService().list_published(request.args.get("itemType", "game")))


@catalog_bp.route("/projects/<item_type>/<slug>", methods=["GET"])
@handle_action_errors
def get_project(item_type, slug):
    service = ProjectService()
    project = service.get_project(slug, item_type, admin_access=_is_staff(current_actor()))
    return success_response(service.project_with_details(project))


@catalog_bp.route("/projects/<item_type>/<slug>/categories/<category_slug>", methods=["GET"])
@handle_action_errors
def get_category(item_type, slug, category_slug):
    category = CategoryService().get_category_details(slug, item_type, category_slug)
    return success_response(category.to_dict())


@catalog_bp.route("/projects/<item_type>/<slug>/categories/<category_slug>/filter-groups", methods=["GET"])
@handle_action_errors
def get_filter_groups(item_type, slug, category_slug):
    return success_response(CategoryService().get_available_filter_groups(slug, item_type, category_slug))


@catalog_bp.route("/projects/<item_type>/<slug>/categories/<category_slug>/resources", methods=["GET"])
@handle_action_errors
def list_resources(item_type, slug, category_slug):
    """
    Query args: tags (comma separated tag ids, all required), q, sort,
    page, limit, includeDrafts (staff only).
    """
    page = request.args.get("page", 1, type=int)
    limit = request.args.get("limit", load_settings()["listing"]["page_size"], type=int)
    tags = [tag_id for tag_id in request.args.get("tags", "").split(",") if tag_id]
    items, total = ResourceService().list_resources(
        slug,
        item_type,
        category_slug,
        tag_ids=tags,
        search_query=request.args.get("q"),
        sort_by=request.args.get("sort", "relevance"),
        page=page,
        limit=limit,
        include_drafts=request.args.get("includeDrafts") in ("1", "true"),
        actor=current_actor(),
    )
    return paginated_response(items, total, max(page, 1), max(limit, 1))


@catalog_bp.route("/projects/<item_type>/<slug>/categories/<category_slug>/best-match", methods=["GET"])
@handle_action_errors
def best_match(item_type, slug, category_slug):
    return success_response(ResourceService().best_match(slug, item_type, category_slug, request.args.get("q")))


@catalog_bp.route("/projects/<item_type>/<slug>/categories/<category_slug>/highlighted", methods=["GET"])
@handle_action_errors
def highlighted(item_type, slug, category_slug):
    return success_response(ResourceService().highlighted(slug, item_type, category_slug))


@catalog_bp.route("/section-tags", methods=["GET"])
@handle_action_errors
def list_section_tags():
    tags = ProjectService().list_section_tags(request.args.get("itemType", "game"))
    return success_response([tag.to_dict() for tag in tags])
