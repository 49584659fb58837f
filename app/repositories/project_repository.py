"""
Repository for Project database operations
"""

from sqlalchemy import func
from db import db
from constants import STATUS_PUBLISHED
from models import Project, Resource


class ProjectRepository:
    """Repository for Project (items table) database operations"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_id(self, id):
        """Get Project by ID"""
        return self.session.get(Project, id)

    def get_by_slug(self, slug, item_type):
        """Get Project by slug within an item type"""
        return self.session.query(Project).filter_by(slug=slug, item_type=item_type).first()

    def get_all(self):
        """All projects, grouped by type, newest first"""
        return self.session.query(Project).order_by(Project.item_type, Project.created_at.desc()).all()

    def get_published_by_type(self, item_type):
        return (
            self.session.query(Project)
            .filter_by(item_type=item_type, status=STATUS_PUBLISHED)
            .order_by(Project.created_at.desc())
            .all()
        )

    def add(self, project):
        self.session.add(project)
        self.session.flush()
        return project

    def delete(self, project):
        self.session.delete(project)
        self.session.flush()

    def get_stats(self, project):
        """Published resource count, downloads and followers for a project"""
        total_resources, total_downloads = (
            self.session.query(func.count(Resource.id), func.coalesce(func.sum(Resource.downloads), 0))
            .filter(Resource.parent_item_id == project.id, Resource.status == STATUS_PUBLISHED)
            .one()
        )
        return {
            "totalResources": total_resources or 0,
            "totalDownloads": total_downloads or 0,
            "totalFollowers": project.followers_count or 0,
        }
