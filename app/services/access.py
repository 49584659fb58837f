"""
Authorization checks shared by the services.

The actor is always a Profile loaded from the database (session or API
token); roles sent by a client are never trusted.
"""

from constants import ITEM_TYPE_PLURALS
from exceptions import AuthenticationException, AuthorizationException


def require_user(actor):
    if actor is None or not getattr(actor, "is_authenticated", False):
        raise AuthenticationException()
    return actor


def require_staff(actor):
    require_user(actor)
    if not actor.is_staff:
        raise AuthorizationException(f"Role '{actor.role}' is not allowed to do this (admin or mod required).")
    return actor


def require_admin(actor):
    require_user(actor)
    if not actor.is_admin:
        raise AuthorizationException("Admin access required.")
    return actor


def require_resource_manager(actor, creator_row):
    """Creator of the resource, or staff."""
    require_user(actor)
    if actor.is_staff:
        return actor
    if creator_row is not None and creator_row.author_id == actor.id:
        return actor
    raise AuthorizationException("Permission denied: you are not the creator of this resource.")


def public_paths(project, category=None, resource=None):
    """Public pages affected by a change, returned to the caller for cache refresh."""
    base = f"/{ITEM_TYPE_PLURALS.get(project.item_type, project.item_type)}"
    paths = [base, f"{base}/{project.slug}"]
    if category is not None:
        paths.append(f"{base}/{project.slug}/{category.slug}")
        if resource is not None:
            paths.append(f"{base}/{project.slug}/{category.slug}/{resource.slug}")
    return paths
