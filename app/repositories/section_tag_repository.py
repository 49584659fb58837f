"""
Repository for SectionTag database operations
"""

from db import db
from models import SectionTag, project_section_tags


class SectionTagRepository:
    """Repository for SectionTag database operations"""

    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def get_by_id(self, id):
        """Get SectionTag by ID"""
        return self.session.get(SectionTag, id)

    def get_by_ids(self, ids):
        """Get SectionTags by a list of IDs"""
        if not ids:
            return []
        return self.session.query(SectionTag).filter(SectionTag.id.in_(ids)).all()

    def get_for_item_type(self, item_type):
        return self.session.query(SectionTag).filter_by(item_type=item_type).order_by(SectionTag.name).all()

    def get_for_project(self, project_id):
        return (
            self.session.query(SectionTag)
            .join(project_section_tags, project_section_tags.c.section_tag_id == SectionTag.id)
            .filter(project_section_tags.c.project_id == project_id)
            .order_by(SectionTag.name)
            .all()
        )

    def add(self, tag):
        self.session.add(tag)
        self.session.flush()
        return tag

    def delete(self, tag):
        """Unlink the tag from every project, then drop it from the pool"""
        self.session.execute(project_section_tags.delete().where(project_section_tags.c.section_tag_id == tag.id))
        self.session.delete(tag)
        self.session.flush()
