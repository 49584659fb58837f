"""
Projects and the section tag pool.
"""
import logging
import time

from constants import ITEM_TYPES, PROJECT_STATUSES, STATUS_ARCHIVED, STATUS_DRAFT, STATUS_PUBLISHED
from db import db, transaction
from exceptions import NotFoundException, ValidationException
from models import Project, SectionTag
from repositories.project_repository import ProjectRepository
from repositories.section_tag_repository import SectionTagRepository
from repositories.slug_helper import generate_unique_slug
from services.access import require_admin, require_staff
from settings import load_settings
from utils import to_base36

logger = logging.getLogger("main")

PROJECT_FIELDS = {
    "name": "name",
    "description": "description",
    "longDescription": "long_description",
    "bannerUrl": "banner_url",
    "iconUrl": "icon_url",
    "projectUrl": "project_url",
    "authorDisplayName": "author_display_name",
    "status": "status",
    "followersCount": "followers_count",
}


def _check_item_type(item_type):
    if item_type not in ITEM_TYPES:
        raise ValidationException(f"Unknown item type '{item_type}'.")


class ProjectService:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.projects = ProjectRepository(self.session)
        self.section_tags = SectionTagRepository(self.session)

    # --- reads ---

    def get_project(self, slug_or_id, item_type, by_id=False, admin_access=False):
        """
        Public callers never see archived projects, and drafts only when
        addressed by id.
        """
        if by_id:
            project = self.projects.get_by_id(slug_or_id)
            if project is not None and project.item_type != item_type:
                project = None
        else:
            project = self.projects.get_by_slug(slug_or_id, item_type)

        if project is None:
            raise NotFoundException("Project not found.")
        if not admin_access:
            if project.status == STATUS_ARCHIVED or (project.status == STATUS_DRAFT and not by_id):
                raise NotFoundException("Project not found.")
        return project

    def project_with_details(self, project):
        data = project.to_dict()
        data["categories"] = [category.to_dict() for category in project.categories]
        data["stats"] = self.projects.get_stats(project)
        return data

    def list_published(self, item_type):
        _check_item_type(item_type)
        return [self.project_with_details(project) for project in self.projects.get_published_by_type(item_type)]

    def list_all(self, actor):
        require_staff(actor)
        return [self.project_with_details(project) for project in self.projects.get_all()]

    # --- writes ---

    def _apply_section_tags(self, project, tag_ids):
        tags = self.section_tags.get_by_ids(tag_ids)
        if len(tags) != len(set(tag_ids)):
            raise ValidationException("Unknown section tag id.")
        project.section_tags = sorted(tags, key=lambda tag: tag.name)

    def create_project(self, actor, data):
        require_staff(actor)
        name = (data.get("name") or "").strip()
        item_type = data.get("itemType")
        status = data.get("status", STATUS_PUBLISHED)
        if not name:
            raise ValidationException("Project name is required.")
        _check_item_type(item_type)
        if status not in PROJECT_STATUSES:
            raise ValidationException(f"Unknown status '{status}'.")

        placeholders = load_settings()["placeholders"]
        with transaction(self.session):
            slug = generate_unique_slug(self.session, Project, (data.get("slug") or "").strip() or name, item_type=item_type)
            project = Project(
                id=f"item_{slug.replace('-', '_')}_{to_base36(int(time.time() * 1000))}",
                name=name,
                slug=slug,
                item_type=item_type,
                description=data.get("description"),
                long_description=data.get("longDescription"),
                banner_url=data.get("bannerUrl") or placeholders["project_banner"],
                icon_url=data.get("iconUrl") or placeholders["project_icon"],
                project_url=data.get("projectUrl"),
                author_display_name=data.get("authorDisplayName"),
                status=status,
                followers_count=0,
            )
            self.projects.add(project)
            if data.get("tagIds"):
                self._apply_section_tags(project, data["tagIds"])

        logger.info(f"Project {project.id} created by {actor.id}")
        return project

    def update_project(self, actor, project_id, data):
        require_staff(actor)
        project = self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundException("Project not found for update.")
        if "status" in data and data["status"] not in PROJECT_STATUSES:
            raise ValidationException(f"Unknown status '{data['status']}'.")
        if "name" in data and not (data.get("name") or "").strip():
            raise ValidationException("Project name is required.")

        with transaction(self.session):
            requested_slug = (data.get("slug") or "").strip()
            if requested_slug and requested_slug != project.slug:
                project.slug = generate_unique_slug(
                    self.session, Project, requested_slug, exclude_id=project.id, item_type=project.item_type
                )
            elif data.get("name") and data["name"] != project.name and not requested_slug:
                project.slug = generate_unique_slug(
                    self.session, Project, data["name"], exclude_id=project.id, item_type=project.item_type
                )

            for key, attribute in PROJECT_FIELDS.items():
                if key in data and data[key] is not None:
                    setattr(project, attribute, data[key].strip() if key == "name" else data[key])

            if "tagIds" in data and data["tagIds"] is not None:
                self._apply_section_tags(project, data["tagIds"])

        return project

    def delete_project(self, actor, project_id):
        require_admin(actor)
        project = self.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundException("Project not found.")
        with transaction(self.session):
            project.section_tags = []
            self.projects.delete(project)
        logger.info(f"Project {project_id} deleted by {actor.id}")

    # --- section tag pool ---

    def list_section_tags(self, item_type):
        _check_item_type(item_type)
        return self.section_tags.get_for_item_type(item_type)

    def list_project_section_tags(self, project_id):
        return self.section_tags.get_for_project(project_id)

    def create_section_tag(self, actor, item_type, name, description=None):
        require_staff(actor)
        _check_item_type(item_type)
        name = (name or "").strip()
        if not name:
            raise ValidationException("Tag name is required.")

        with transaction(self.session):
            slug = generate_unique_slug(self.session, SectionTag, name, item_type=item_type)
            stamp = to_base36(int(time.time() * 1000))[-4:]
            tag = SectionTag(
                id=f"stag_{slug.replace('-', '_')}_{item_type[:3]}_{stamp}",
                item_type=item_type,
                name=name,
                slug=slug,
                description=description,
            )
            self.section_tags.add(tag)
        return tag

    def update_section_tag(self, actor, tag_id, name, description=None):
        require_staff(actor)
        tag = self.section_tags.get_by_id(tag_id)
        if tag is None:
            raise NotFoundException("Section tag not found.")
        name = (name or "").strip()
        if not name:
            raise ValidationException("Tag name is required.")

        with transaction(self.session):
            if name != tag.name:
                tag.slug = generate_unique_slug(self.session, SectionTag, name, exclude_id=tag.id, item_type=tag.item_type)
            tag.name = name
            if description is not None:
                tag.description = description
        return tag

    def delete_section_tag(self, actor, tag_id):
        require_staff(actor)
        tag = self.section_tags.get_by_id(tag_id)
        if tag is None:
            raise NotFoundException("Section tag not found.")
        with transaction(self.session):
            self.section_tags.delete(tag)
