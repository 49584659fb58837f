"""
Repository for Resource database operations
"""

import json

from sqlalchemy import case, func, or_
from db import db
from constants import STATUS_DRAFT, STATUS_PUBLISHED
from models import Resource, ResourceAuthor, ResourceFile


class ResourceRepository:
    """Repository for Resource, ResourceAuthor and ResourceFile queries"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_id(self, id):
        """Get Resource by ID"""
        return self.session.get(Resource, id)

    def get_by_slug(self, slug, project_id=None, category_id=None, statuses=(STATUS_PUBLISHED, STATUS_DRAFT)):
        """Get Resource by slug, optionally scoped to a project/category"""
        query = self.session.query(Resource).filter(Resource.slug == slug)
        if project_id is not None:
            query = query.filter(Resource.parent_item_id == project_id)
        if category_id is not None:
            query = query.filter(Resource.category_id == category_id)
        if statuses:
            query = query.filter(Resource.status.in_(statuses))
        return query.order_by(Resource.created_at).first()

    def search(
        self,
        project_id,
        category_id,
        tag_ids=None,
        search_query=None,
        sort_by="relevance",
        page=1,
        limit=20,
        include_drafts=False,
    ):
        """
        Filtered, sorted, paginated resources of one category.
        Returns (resources, total matching).
        """
        query = self.session.query(Resource).filter(
            Resource.parent_item_id == project_id,
            Resource.category_id == category_id,
        )
        if not include_drafts:
            query = query.filter(Resource.status == STATUS_PUBLISHED)

        search_query = (search_query or "").strip()
        if search_query:
            pattern = f"%{search_query.lower()}%"
            query = query.filter(
                or_(func.lower(Resource.name).like(pattern), func.lower(Resource.description).like(pattern))
            )

        # Every requested tag id must appear as a list element of the stored
        # selection; group ids are keys and are followed by ":" instead
        for tag_id in tag_ids or []:
            quoted = json.dumps(str(tag_id))
            query = query.filter(
                or_(
                    func.instr(Resource.selected_dynamic_tags_json, quoted + ",") > 0,
                    func.instr(Resource.selected_dynamic_tags_json, quoted + "]") > 0,
                )
            )

        total = query.count()

        if sort_by == "name":
            order_by = [Resource.name.asc()]
        elif sort_by == "updatedAt":
            order_by = [Resource.updated_at.desc()]
        elif sort_by == "downloads":
            order_by = [Resource.downloads.desc()]
        elif search_query:
            lowered = search_query.lower()
            order_by = [
                case((func.lower(Resource.name) == lowered, 0), else_=1),
                case((func.lower(Resource.name).like(f"{lowered}%"), 1), else_=2),
                Resource.updated_at.desc(),
            ]
        else:
            order_by = [Resource.downloads.desc(), Resource.updated_at.desc()]

        resources = query.order_by(*order_by).offset((page - 1) * limit).limit(limit).all()
        return resources, total

    def get_creator(self, resource_id):
        return self.session.query(ResourceAuthor).filter_by(resource_id=resource_id, is_creator=True).first()

    def get_author(self, resource_id, author_id):
        return self.session.get(ResourceAuthor, (resource_id, author_id))

    def get_authors(self, resource_id):
        return (
            self.session.query(ResourceAuthor)
            .filter_by(resource_id=resource_id)
            .order_by(ResourceAuthor.is_creator.desc(), ResourceAuthor.sort_order)
            .all()
        )

    def next_author_sort_order(self, resource_id):
        max_order = (
            self.session.query(func.max(ResourceAuthor.sort_order))
            .filter(ResourceAuthor.resource_id == resource_id)
            .scalar()
        )
        return (max_order if max_order is not None else -1) + 1

    def get_file(self, file_id):
        return self.session.get(ResourceFile, file_id)

    def _published_for_author(self, author_id):
        return self.session.query(Resource).filter(
            Resource.author_id == author_id,
            Resource.status == STATUS_PUBLISHED,
        )

    def count_published_for_author(self, author_id):
        return self._published_for_author(author_id).count()

    def get_rated_for_author(self, author_id):
        """Published resources of an author that have at least one review"""
        return (
            self._published_for_author(author_id)
            .filter(Resource.rating.isnot(None), Resource.review_count > 0)
            .all()
        )

    def get_top_for_author(self, author_id, count=3):
        return (
            self._published_for_author(author_id)
            .order_by(Resource.downloads.desc(), Resource.rating.desc(), Resource.updated_at.desc())
            .limit(count)
            .all()
        )

    def get_published_for_author(self, author_id, sort_by="created_at", order="DESC", limit=None, exclude_ids=None):
        columns = {
            "created_at": Resource.created_at,
            "updated_at": Resource.updated_at,
            "downloads": Resource.downloads,
            "rating": Resource.rating,
        }
        column = columns.get(sort_by, Resource.created_at)
        query = self._published_for_author(author_id)
        if exclude_ids:
            query = query.filter(Resource.id.notin_(exclude_ids))
        query = query.order_by(column.asc() if str(order).upper() == "ASC" else column.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def add(self, resource):
        self.session.add(resource)
        self.session.flush()
        return resource

    def delete(self, resource):
        """Delete a resource; authors, files, changelog, reviews and sentiments go with it"""
        self.session.delete(resource)
        self.session.flush()

    def increment_downloads(self, resource_id):
        updated = (
            self.session.query(Resource)
            .filter(Resource.id == resource_id)
            .update({Resource.downloads: Resource.downloads + 1}, synchronize_session=False)
        )
        return updated > 0

    def increment_file_downloads(self, file_id):
        updated = (
            self.session.query(ResourceFile)
            .filter(ResourceFile.id == file_id)
            .update({ResourceFile.downloads: ResourceFile.downloads + 1}, synchronize_session=False)
        )
        return updated > 0
