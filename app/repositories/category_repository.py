"""
Repository for Category database operations
"""

import copy
from sqlalchemy import func
from db import db
from models import Category
from tag_config import ProjectTagGroupSource, decode_tag_config


class CategoryRepository:
    """Repository for Category database operations"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_id(self, id):
        """Get Category by ID"""
        return self.session.get(Category, id)

    def get_by_slug(self, project_id, slug):
        """Get Category by slug within its project"""
        return self.session.query(Category).filter_by(parent_item_id=project_id, slug=slug).first()

    def get_for_project(self, project_id):
        """Categories of a project ordered by sort_order then name"""
        return (
            self.session.query(Category)
            .filter_by(parent_item_id=project_id)
            .order_by(Category.sort_order, Category.name)
            .all()
        )

    def next_sort_order(self, project_id):
        max_order = (
            self.session.query(func.max(Category.sort_order)).filter(Category.parent_item_id == project_id).scalar()
        )
        return (max_order if max_order is not None else -1) + 1

    def add(self, category):
        self.session.add(category)
        self.session.flush()
        return category

    def delete(self, category):
        self.session.delete(category)
        self.session.flush()

    def list_all_group_sources(self, project_id):
        """
        Every tag group of every category of the project, for import browsing.

        Categories come in sort_order/name order and groups in their own
        sort order. Nothing is deduplicated: two categories with a
        "Platform" group give two entries. Groups are independent copies.
        """
        sources = []
        for category in self.get_for_project(project_id):
            groups = decode_tag_config(category.description).groups
            for group in sorted(groups, key=lambda group: group.sort_order):
                sources.append(
                    ProjectTagGroupSource(
                        source_category_id=category.id,
                        source_category_name=category.name,
                        group_config=copy.deepcopy(group),
                    )
                )
        return sources
