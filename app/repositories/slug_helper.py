"""
Unique slug generation shared by the repositories.
"""

from utils import slugify, to_base36
import time


def generate_unique_slug(session, model, text, exclude_id=None, **scope):
    """
    Slug for `text` that is free within `scope` (column=value filters).
    Collisions get "-1", "-2", ... appended. `exclude_id` lets a row keep
    its own slug when it is being renamed.
    """
    table_name = model.__tablename__
    base_slug = slugify(text) if text else ""
    if not base_slug:
        base_slug = f"{table_name}-{to_base36(int(time.time() * 1000))}"

    slug = base_slug
    counter = 1
    while True:
        query = session.query(model.id).filter(model.slug == slug)
        for column, value in scope.items():
            query = query.filter(getattr(model, column) == value)
        if exclude_id is not None:
            query = query.filter(model.id != exclude_id)
        if query.first() is None:
            return slug
        slug = f"{base_slug}-{counter}"
        counter += 1
