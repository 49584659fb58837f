"""
Models package

One module per aggregate:
- project.py (items + project_section_tags)
- category.py
- resource.py / resource_file.py
- review.py
- profile.py / apitoken.py
- section_tag.py

Usage:
    from models import Project, Category, Resource
"""

from .profile import Profile
from .apitoken import ApiToken
from .section_tag import SectionTag
from .project import Project, project_section_tags
from .category import Category
from .resource import Resource, ResourceAuthor
from .resource_file import ResourceFile, ChangelogEntry
from .review import Review, UserReviewSentiment

__all__ = [
    "Profile",
    "ApiToken",
    "SectionTag",
    "Project",
    "project_section_tags",
    "Category",
    "Resource",
    "ResourceAuthor",
    "ResourceFile",
    "ChangelogEntry",
    "Review",
    "UserReviewSentiment",
]
