"""
Resources: save with file sync, delete, listing and detail views.
"""
import logging
import time
from datetime import date

from constants import (
    FILE_CHANNELS,
    PROJECT_STATUSES,
    RELEASE_CHANNEL,
    RESOURCE_SORTS,
    STATUS_PUBLISHED,
)
from db import db, transaction
from exceptions import NotFoundException, ValidationException
from models import ChangelogEntry, Resource, ResourceAuthor, ResourceFile
from repositories.category_repository import CategoryRepository
from repositories.project_repository import ProjectRepository
from repositories.resource_repository import ResourceRepository
from repositories.slug_helper import generate_unique_slug
from services.access import public_paths, require_resource_manager, require_user
from settings import load_settings
from tag_config import (
    channel_display_tag,
    decode_tag_config,
    parse_selection,
    resolve_display_tags,
    restrict_to_file_groups,
    serialize_selection,
)
from utils import generate_id, to_base36

logger = logging.getLogger("main")

CHANNEL_IDS = {channel["id"] for channel in FILE_CHANNELS}


def _stamp():
    return to_base36(int(time.time() * 1000))


def _canonical_selection(selection):
    return {group_id: sorted(tag_ids) for group_id, tag_ids in parse_selection(selection).items()}


def _iso(value):
    return value.isoformat() if value else None


def mark_most_helpful(reviews):
    """
    Flag the review with the most "helpful" votes (ties go to the newer one).
    Nothing is flagged while no review has a helpful vote.
    """
    best = None
    for review in reviews:
        helpful = (review.get("interactionCounts") or {}).get("helpful", 0)
        if helpful <= 0:
            continue
        if (
            best is None
            or helpful > best[0]
            or (helpful == best[0] and (review.get("createdAt") or "") > (best[1].get("createdAt") or ""))
        ):
            best = (helpful, review)
    for review in reviews:
        review["isMostHelpful"] = best is not None and review is best[1]
    return reviews


def serialize_file(resource_file, groups):
    selection = parse_selection(resource_file.selected_file_tags_json)
    channel = channel_display_tag(resource_file.channel_id)
    entry = resource_file.changelog_entry
    return {
        "id": resource_file.id,
        "resourceId": resource_file.resource_id,
        "name": resource_file.name,
        "url": resource_file.url,
        "versionName": resource_file.version_name,
        "size": resource_file.size,
        "channelId": resource_file.channel_id,
        "channel": channel.to_dict() if channel else None,
        "downloads": resource_file.downloads or 0,
        "changelogNotes": entry.notes if entry else None,
        "selectedFileTags": selection,
        "fileDisplayTags": [tag.to_dict() for tag in resolve_display_tags(selection, groups, filter_to_file_applicable=True)],
        "createdAt": _iso(resource_file.created_at),
        "updatedAt": _iso(resource_file.updated_at),
    }


def serialize_resource(resource, groups=None, include_reviews=False):
    """Display-ready resource; selections are resolved against the category's live groups."""
    if groups is None:
        groups = decode_tag_config(resource.category.description).groups
    project = resource.project
    category = resource.category
    selection = parse_selection(resource.selected_dynamic_tags_json)
    data = {
        "id": resource.id,
        "name": resource.name,
        "slug": resource.slug,
        "parentItemId": resource.parent_item_id,
        "parentItemName": project.name if project else None,
        "parentItemSlug": project.slug if project else None,
        "parentItemType": project.item_type if project else None,
        "categoryId": resource.category_id,
        "categoryName": category.name if category else None,
        "categorySlug": category.slug if category else None,
        "authorId": resource.author_id,
        "author": resource.author.to_author_dict() if resource.author else None,
        "authors": [author.to_dict() for author in resource.authors],
        "version": resource.version,
        "description": resource.description,
        "detailedDescription": resource.detailed_description,
        "imageUrl": resource.image_url,
        "imageGallery": resource.image_gallery or [],
        "links": resource.links or {},
        "requirements": resource.requirements,
        "status": resource.status,
        "downloads": resource.downloads or 0,
        "followers": resource.followers or 0,
        "rating": resource.rating,
        "reviewCount": resource.review_count or 0,
        "positiveReviewPercentage": resource.positive_review_percentage,
        "selectedDynamicTags": selection,
        "tags": [tag.to_dict() for tag in resolve_display_tags(selection, groups)],
        "files": [serialize_file(resource_file, groups) for resource_file in resource.files],
        "createdAt": _iso(resource.created_at),
        "updatedAt": _iso(resource.updated_at),
    }
    if include_reviews:
        data["reviews"] = mark_most_helpful([review.to_dict() for review in resource.reviews])
    return data


class ResourceService:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.projects = ProjectRepository(self.session)
        self.categories = CategoryRepository(self.session)
        self.resources = ResourceRepository(self.session)

    # --- writes ---

    def save_resource(self, actor, data, resource_id=None, project_id=None, category_id=None):
        """
        Create (no resource_id) or update a resource and sync its files in one
        transaction. Non-staff authors always publish on create and cannot
        change the status afterwards.
        """
        require_user(actor)
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationException("Resource name is required.")
        files_data = data.get("files") or []
        if not isinstance(files_data, list):
            raise ValidationException("files must be a list.")
        status = data.get("status", STATUS_PUBLISHED)
        if actor.is_staff and status not in PROJECT_STATUSES:
            raise ValidationException(f"Unknown status '{status}'.")

        if resource_id:
            resource = self.resources.get_by_id(resource_id)
            if resource is None:
                raise NotFoundException("Resource not found for update.")
            require_resource_manager(actor, self.resources.get_creator(resource.id))
            project, category = resource.project, resource.category
        else:
            resource = None
            project = self.projects.get_by_id(project_id)
            category = self.categories.get_by_id(category_id)
            if project is None or category is None or category.parent_item_id != project.id:
                raise NotFoundException("Project or category not found.")

        groups = decode_tag_config(category.description).groups
        selected_tags = data.get("selectedDynamicTags")

        with transaction(self.session):
            if resource is None:
                slug = generate_unique_slug(
                    self.session,
                    Resource,
                    (data.get("slug") or "").strip() or name,
                    parent_item_id=project.id,
                    category_id=category.id,
                )
                resource = Resource(
                    id=f"res_{slug.replace('-', '_')}_{_stamp()}",
                    name=name,
                    slug=slug,
                    parent_item_id=project.id,
                    category_id=category.id,
                    author_id=actor.id,
                    version=data.get("version"),
                    description=data.get("description"),
                    detailed_description=data.get("detailedDescription"),
                    image_url=data.get("imageUrl") or load_settings()["placeholders"]["resource_image"],
                    image_gallery=data.get("imageGallery") or [],
                    links=data.get("links"),
                    requirements=data.get("requirements"),
                    status=status if actor.is_staff else STATUS_PUBLISHED,
                    selected_dynamic_tags_json=serialize_selection(selected_tags) if selected_tags is not None else None,
                    downloads=0,
                    followers=0,
                    review_count=0,
                )
                self.resources.add(resource)
                resource.authors.append(
                    ResourceAuthor(author_id=actor.id, is_creator=True, role_description="Creator", sort_order=0)
                )
                new_version = self._sync_files(resource, files_data, groups)
                if new_version:
                    resource.version = new_version
                logger.info(f"Resource {resource.id} created by {actor.id}")
            else:
                new_version = self._sync_files(resource, files_data, groups)
                requested_slug = (data.get("slug") or "").strip()
                if (requested_slug and requested_slug != resource.slug) or (name != resource.name and not requested_slug):
                    resource.slug = generate_unique_slug(
                        self.session,
                        Resource,
                        requested_slug or name,
                        exclude_id=resource.id,
                        parent_item_id=resource.parent_item_id,
                        category_id=resource.category_id,
                    )
                resource.name = name
                resource.version = new_version or data.get("version") or resource.version
                for key, attribute in (
                    ("description", "description"),
                    ("detailedDescription", "detailed_description"),
                    ("imageUrl", "image_url"),
                    ("imageGallery", "image_gallery"),
                    ("links", "links"),
                    ("requirements", "requirements"),
                ):
                    if data.get(key) is not None:
                        setattr(resource, attribute, data[key])
                if selected_tags is not None:
                    resource.selected_dynamic_tags_json = serialize_selection(selected_tags)
                if actor.is_staff:
                    resource.status = status

        return resource, public_paths(project, category, resource)

    def _sync_files(self, resource, files_data, groups):
        """
        Make the stored files match the submission: drop missing ones (and
        their changelog), insert new ones, update the ones that changed.
        Returns the version of a newly added release-channel file, if any.
        """
        existing = {resource_file.id: resource_file for resource_file in resource.files}
        submitted_ids = {file_data.get("id") for file_data in files_data if file_data.get("id")}
        for resource_file in list(resource.files):
            if resource_file.id not in submitted_ids:
                resource.files.remove(resource_file)

        new_version = None
        today = date.today()
        for file_data in files_data:
            file_name = (file_data.get("name") or "").strip()
            url = (file_data.get("url") or "").strip()
            if not file_name or not url:
                raise ValidationException("Every file needs a name and a url.")
            channel_id = file_data.get("channelId") or None
            if channel_id is not None and channel_id not in CHANNEL_IDS:
                raise ValidationException(f"Unknown file channel '{channel_id}'.")
            version_name = file_data.get("versionName")
            size = file_data.get("size") or None
            notes = (file_data.get("changelogNotes") or "").strip()
            # Only groups flagged for files may be picked on a file
            selection = restrict_to_file_groups(file_data.get("selectedFileTags"), groups)

            resource_file = existing.get(file_data.get("id"))
            if resource_file is None:
                if channel_id in (None, RELEASE_CHANNEL) and version_name:
                    new_version = version_name
                resource_file = ResourceFile(
                    id=generate_id("rfile"),
                    name=file_name,
                    url=url,
                    version_name=version_name,
                    size=size,
                    channel_id=channel_id,
                    selected_file_tags_json=serialize_selection(selection),
                    downloads=0,
                )
                resource.files.append(resource_file)
                if notes:
                    resource_file.changelog_entry = self._changelog(resource, resource_file, version_name, notes, today)
                continue

            current_notes = resource_file.changelog_entry.notes if resource_file.changelog_entry else ""
            changed = (
                file_name != resource_file.name
                or url != resource_file.url
                or version_name != resource_file.version_name
                or size != resource_file.size
                or channel_id != resource_file.channel_id
                or _canonical_selection(selection) != _canonical_selection(resource_file.selected_file_tags_json)
                or notes != (current_notes or "").strip()
            )
            if not changed:
                continue

            resource_file.name = file_name
            resource_file.url = url
            resource_file.version_name = version_name
            resource_file.size = size
            resource_file.channel_id = channel_id
            resource_file.selected_file_tags_json = serialize_selection(selection)
            entry = resource_file.changelog_entry
            if notes and entry is not None:
                entry.version_name = version_name
                entry.notes = notes
                entry.date = today
            elif notes:
                resource_file.changelog_entry = self._changelog(resource, resource_file, version_name, notes, today)
            elif entry is not None:
                resource_file.changelog_entry = None

        return new_version

    @staticmethod
    def _changelog(resource, resource_file, version_name, notes, today):
        return ChangelogEntry(
            id=f"clog_{resource_file.id[6:]}_{_stamp()}",
            resource_id=resource.id,
            version_name=version_name,
            date=today,
            notes=notes,
        )

    def delete_resource(self, actor, resource_id):
        resource = self.resources.get_by_id(resource_id)
        if resource is None:
            raise NotFoundException("Resource not found.")
        require_resource_manager(actor, self.resources.get_creator(resource.id))
        paths = public_paths(resource.project, resource.category)
        with transaction(self.session):
            self.resources.delete(resource)
        logger.info(f"Resource {resource_id} deleted by {actor.id}")
        return paths

    def increment_download(self, resource_id, file_id=None):
        with transaction(self.session):
            if not self.resources.increment_downloads(resource_id):
                raise NotFoundException("Resource not found.")
            if file_id:
                resource_file = self.resources.get_file(file_id)
                if resource_file is None or resource_file.resource_id != resource_id:
                    raise NotFoundException("File not found.")
                self.resources.increment_file_downloads(file_id)

    # --- reads ---

    def list_resources(
        self,
        project_slug,
        item_type,
        category_slug,
        tag_ids=None,
        search_query=None,
        sort_by="relevance",
        page=1,
        limit=None,
        include_drafts=False,
        actor=None,
    ):
        """Returns (resources as dicts, total). Unknown project/category gives an empty page."""
        if limit is None:
            limit = load_settings()["listing"]["page_size"]
        page = max(int(page or 1), 1)
        limit = max(int(limit), 1)
        if sort_by not in RESOURCE_SORTS:
            sort_by = "relevance"
        # Drafts are a staff-only view
        include_drafts = bool(include_drafts and actor is not None and getattr(actor, "is_staff", False))

        project = self.projects.get_by_slug(project_slug, item_type)
        category = self.categories.get_by_slug(project.id, category_slug) if project else None
        if category is None:
            return [], 0

        resources, total = self.resources.search(
            project.id,
            category.id,
            tag_ids=tag_ids,
            search_query=search_query,
            sort_by=sort_by,
            page=page,
            limit=limit,
            include_drafts=include_drafts,
        )
        groups = decode_tag_config(category.description).groups
        return [serialize_resource(resource, groups) for resource in resources], total

    def best_match(self, project_slug, item_type, category_slug, search_query, limit=None):
        if limit is None:
            limit = load_settings()["listing"]["best_match_limit"]
        resources, _ = self.list_resources(project_slug, item_type, category_slug, search_query=search_query, limit=limit)
        return resources

    def highlighted(self, project_slug, item_type, category_slug, limit=None):
        if limit is None:
            limit = load_settings()["listing"]["highlighted_limit"]
        resources, _ = self.list_resources(project_slug, item_type, category_slug, sort_by="downloads", limit=limit)
        return resources

    def get_resource_detail(self, slug):
        """Published or draft resource by slug, with reviews."""
        resource = self.resources.get_by_slug(slug)
        if resource is None:
            raise NotFoundException("Resource not found.")
        return serialize_resource(resource, include_reviews=True)

    def get_resource_for_edit(self, actor, resource_id):
        resource = self.resources.get_by_id(resource_id)
        if resource is None:
            raise NotFoundException("Resource not found.")
        require_resource_manager(actor, self.resources.get_creator(resource.id))
        return serialize_resource(resource)
