"""
Categories and their tag group configuration.

Tag groups are edited as a whole: every save re-validates the submitted list,
renumbers it and rewrites the description column (last writer wins).
"""
import logging
import time
from dataclasses import replace

from db import db, transaction
from exceptions import NotFoundException, ValidationException
from models import Category
from repositories.category_repository import CategoryRepository
from repositories.project_repository import ProjectRepository
from repositories.slug_helper import generate_unique_slug
from services.access import public_paths, require_staff
from tag_config import (
    available_filter_groups,
    clone_group_for_import,
    decode_tag_config,
    encode_tag_config,
    parse_submitted_groups,
    validate_tag_groups,
)
from utils import to_base36

logger = logging.getLogger("main")


def _requested_sort_order(value):
    """A usable explicit sort order, or None (absent, -1 or junk)."""
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


class CategoryService:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.projects = ProjectRepository(self.session)
        self.categories = CategoryRepository(self.session)

    def _get_category(self, category_id):
        category = self.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundException(f"Category with ID {category_id} not found.")
        return category

    def get_category_details(self, project_slug, item_type, category_slug):
        project = self.projects.get_by_slug(project_slug, item_type)
        if project is None:
            raise NotFoundException("Project not found.")
        category = self.categories.get_by_slug(project.id, category_slug)
        if category is None:
            raise NotFoundException("Category not found.")
        return category

    def list_categories(self, actor, project_id):
        require_staff(actor)
        return self.categories.get_for_project(project_id)

    def create_category(self, actor, project_id, data):
        require_staff(actor)
        project = self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundException("Project not found.")
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationException("Category name is required.")

        groups = validate_tag_groups(parse_submitted_groups(data.get("tagGroupConfigs")))
        raw_description = encode_tag_config(data.get("description"), groups)

        with transaction(self.session):
            slug = generate_unique_slug(
                self.session, Category, (data.get("slug") or "").strip() or name, parent_item_id=project.id
            )
            sort_order = _requested_sort_order(data.get("sortOrder"))
            if sort_order is None:
                sort_order = self.categories.next_sort_order(project.id)
            category = Category(
                id=f"cat_{slug.replace('-', '_')}_{project.id[:4]}_{to_base36(int(time.time() * 1000))}",
                name=name,
                slug=slug,
                description=raw_description,
                parent_item_id=project.id,
                sort_order=sort_order,
            )
            self.categories.add(category)

        logger.info(f"Category {category.id} created in project {project.id} with {len(groups)} tag group(s)")
        return category, public_paths(project, category)

    def update_category(self, actor, category_id, data):
        require_staff(actor)
        category = self._get_category(category_id)
        if "name" in data and not (data.get("name") or "").strip():
            raise ValidationException("Category name is required.")

        if "tagGroupConfigs" in data or "description" in data:
            current = decode_tag_config(category.description)
            description = data["description"] if "description" in data else current.description
            if "tagGroupConfigs" in data:
                groups = validate_tag_groups(parse_submitted_groups(data.get("tagGroupConfigs")))
            else:
                groups = current.groups
            raw_description = encode_tag_config(description, groups)
        else:
            raw_description = category.description

        with transaction(self.session):
            name = (data.get("name") or "").strip() or category.name
            requested_slug = (data.get("slug") or "").strip()
            if (requested_slug and requested_slug != category.slug) or (name != category.name and not requested_slug):
                category.slug = generate_unique_slug(
                    self.session,
                    Category,
                    requested_slug or name,
                    exclude_id=category.id,
                    parent_item_id=category.parent_item_id,
                )
            category.name = name
            category.description = raw_description
            sort_order = _requested_sort_order(data.get("sortOrder"))
            if sort_order is not None:
                category.sort_order = sort_order

        return category, public_paths(category.project, category)

    def save_tag_groups(self, actor, category_id, groups_payload):
        """Replace the whole tag group list of a category. An empty list clears it."""
        if not isinstance(groups_payload, list):
            raise ValidationException("tagGroupConfigs must be a list.")
        return self.update_category(actor, category_id, {"tagGroupConfigs": groups_payload})

    def delete_category(self, actor, category_id):
        require_staff(actor)
        category = self._get_category(category_id)
        project = category.project
        with transaction(self.session):
            self.categories.delete(category)
        return public_paths(project)

    def reorder_categories(self, actor, project_id, ordered_category_ids):
        """Position in the list becomes sort_order. Ids of other projects are ignored."""
        require_staff(actor)
        project = self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundException("Project not found.")
        if not isinstance(ordered_category_ids, list):
            raise ValidationException("orderedCategoryIds must be a list.")

        with transaction(self.session):
            for index, category_id in enumerate(ordered_category_ids):
                category = self.categories.get_by_id(category_id)
                if category is not None and category.parent_item_id == project.id:
                    category.sort_order = index
        return public_paths(project)

    def list_group_sources(self, actor, project_id):
        require_staff(actor)
        return self.categories.list_all_group_sources(project_id)

    def import_tag_group(self, actor, category_id, source_category_id, group_id):
        """Append a copy of another category's group; tag ids are kept, the group id is new."""
        require_staff(actor)
        target = self._get_category(category_id)
        source = self._get_category(source_category_id)
        if source.parent_item_id != target.parent_item_id:
            raise ValidationException("Tag groups can only be imported from the same project.")

        source_group = next((group for group in decode_tag_config(source.description).groups if group.id == group_id), None)
        if source_group is None:
            raise NotFoundException("Tag group not found in source category.")

        current = decode_tag_config(target.description)
        # Existing groups are stored as they are; only the incoming copy is checked
        imported = validate_tag_groups([clone_group_for_import(source_group, 0)])[0]
        next_sort_order = max((group.sort_order for group in current.groups), default=-1) + 1
        groups = current.groups + [replace(imported, sort_order=next_sort_order)]

        with transaction(self.session):
            target.description = encode_tag_config(current.description, groups)
        return target

    def get_available_filter_groups(self, project_slug, item_type, category_slug):
        try:
            category = self.get_category_details(project_slug, item_type, category_slug)
        except NotFoundException:
            return []
        return available_filter_groups(decode_tag_config(category.description).groups)
