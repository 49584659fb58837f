"""
Co-author management for a resource. Every operation is limited to the
resource creator and staff and returns the refreshed author list.
"""
import logging

from db import db, transaction
from exceptions import NotFoundException, ValidationException
from models import ResourceAuthor
from repositories.profile_repository import ProfileRepository
from repositories.resource_repository import ResourceRepository
from services.access import require_resource_manager, require_user

logger = logging.getLogger("main")

DEFAULT_ROLE = "Collaborator"


class AuthorService:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session
        self.resources = ResourceRepository(self.session)
        self.profiles = ProfileRepository(self.session)

    def _managed_resource(self, actor, resource_id):
        resource = self.resources.get_by_id(resource_id)
        if resource is None:
            raise NotFoundException("Resource not found.")
        require_resource_manager(actor, self.resources.get_creator(resource.id))
        return resource

    def _authors(self, resource_id):
        return [author.to_dict() for author in self.resources.get_authors(resource_id)]

    def _existing_author(self, resource_id, profile_id):
        author = self.resources.get_author(resource_id, profile_id)
        if author is None:
            raise NotFoundException("This user is not an author of the resource.")
        return author

    def search_profiles(self, actor, query, limit=10):
        require_user(actor)
        if not (query or "").strip():
            return []
        return [profile.to_author_dict() for profile in self.profiles.search(query, limit=limit)]

    def list_authors(self, resource_id):
        if self.resources.get_by_id(resource_id) is None:
            raise NotFoundException("Resource not found.")
        return self._authors(resource_id)

    def add_author(self, actor, resource_id, profile_id, role_description=None):
        resource = self._managed_resource(actor, resource_id)
        if self.profiles.get_by_id(profile_id) is None:
            raise NotFoundException("Profile not found.")
        if self.resources.get_author(resource.id, profile_id) is not None:
            raise ValidationException("This user is already an author of the resource.")

        with transaction(self.session):
            self.session.add(
                ResourceAuthor(
                    resource_id=resource.id,
                    author_id=profile_id,
                    role_description=(role_description or "").strip() or DEFAULT_ROLE,
                    is_creator=False,
                    sort_order=self.resources.next_author_sort_order(resource.id),
                )
            )
        return self._authors(resource.id)

    def remove_author(self, actor, resource_id, profile_id):
        resource = self._managed_resource(actor, resource_id)
        author = self._existing_author(resource.id, profile_id)
        if author.is_creator:
            raise ValidationException("The creator cannot be removed. Transfer ownership first.")

        with transaction(self.session):
            self.session.delete(author)
        return self._authors(resource.id)

    def update_role(self, actor, resource_id, profile_id, role_description):
        resource = self._managed_resource(actor, resource_id)
        author = self._existing_author(resource.id, profile_id)
        with transaction(self.session):
            author.role_description = (role_description or "").strip() or None
        return self._authors(resource.id)

    def update_color(self, actor, resource_id, profile_id, color):
        resource = self._managed_resource(actor, resource_id)
        author = self._existing_author(resource.id, profile_id)
        with transaction(self.session):
            author.author_color = color or None
        return self._authors(resource.id)

    def transfer_ownership(self, actor, resource_id, new_creator_id):
        """
        Make another profile the creator. The previous creator stays on as a
        regular author; the new one is added first if needed.
        """
        resource = self._managed_resource(actor, resource_id)
        if self.profiles.get_by_id(new_creator_id) is None:
            raise NotFoundException("Profile not found.")
        current = self.resources.get_creator(resource.id)
        if current is not None and current.author_id == new_creator_id:
            return self._authors(resource.id)

        with transaction(self.session):
            if current is not None:
                current.is_creator = False
                if current.role_description == "Creator":
                    current.role_description = DEFAULT_ROLE
            new_creator = self.resources.get_author(resource.id, new_creator_id)
            if new_creator is None:
                new_creator = ResourceAuthor(
                    resource_id=resource.id,
                    author_id=new_creator_id,
                    sort_order=self.resources.next_author_sort_order(resource.id),
                )
                self.session.add(new_creator)
            new_creator.is_creator = True
            new_creator.role_description = "Creator"
            resource.author_id = new_creator_id

        logger.info(f"Resource {resource.id} transferred to {new_creator_id} by {actor.id}")
        return self._authors(resource.id)
