"""
Model: Resource, ResourceAuthor
"""

from db import db, now_utc
from constants import STATUS_PUBLISHED


class Resource(db.Model):
    __tablename__ = "resources"

    id = db.Column(db.String, primary_key=True)
    name = db.Column(db.String, nullable=False)
    slug = db.Column(db.String, nullable=False, index=True)
    parent_item_id = db.Column(db.String, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = db.Column(db.String, db.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    # Legacy single-author column, mirrors the creator row in resource_authors
    author_id = db.Column(db.String, db.ForeignKey("profiles.id"), nullable=False, index=True)
    version = db.Column(db.String)
    description = db.Column(db.Text)
    detailed_description = db.Column(db.Text)
    image_url = db.Column(db.String)
    image_gallery = db.Column(db.JSON)  # list of urls
    links = db.Column(db.JSON)  # {"discord": ..., "wiki": ..., "issues": ..., "source": ..., "projectUrl": ...}
    requirements = db.Column(db.Text)
    status = db.Column(db.String(20), default=STATUS_PUBLISHED, index=True)
    downloads = db.Column(db.Integer, default=0)
    followers = db.Column(db.Integer, default=0)
    rating = db.Column(db.Float)
    review_count = db.Column(db.Integer, default=0)
    positive_review_percentage = db.Column(db.Float)
    # Raw {groupId: [tagId, ...]} text, kept as text so it can be filtered with instr()
    selected_dynamic_tags_json = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    author = db.relationship("Profile", foreign_keys=[author_id])
    authors = db.relationship(
        "ResourceAuthor",
        backref="resource",
        cascade="all, delete",
        order_by="(ResourceAuthor.is_creator.desc(), ResourceAuthor.sort_order)",
    )
    files = db.relationship(
        "ResourceFile",
        backref="resource",
        cascade="all, delete-orphan",
        order_by="(ResourceFile.updated_at.desc(), ResourceFile.created_at.desc())",
    )
    changelog = db.relationship("ChangelogEntry", backref="resource", cascade="all, delete")
    reviews = db.relationship(
        "Review",
        backref="resource",
        cascade="all, delete",
        order_by="Review.created_at.desc()",
    )

    __table_args__ = (
        db.UniqueConstraint("parent_item_id", "category_id", "slug", name="uq_resources_scope_slug"),
    )


class ResourceAuthor(db.Model):
    __tablename__ = "resource_authors"

    resource_id = db.Column(db.String, db.ForeignKey("resources.id", ondelete="CASCADE"), primary_key=True)
    author_id = db.Column(db.String, db.ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True)
    role_description = db.Column(db.String)
    author_color = db.Column(db.String)
    is_creator = db.Column(db.Boolean, default=False)
    sort_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=now_utc)

    profile = db.relationship("Profile")

    def to_dict(self):
        data = self.profile.to_author_dict() if self.profile else {"id": self.author_id}
        data.update(
            {
                "roleDescription": self.role_description,
                "authorColor": self.author_color,
                "isCreator": bool(self.is_creator),
                "sortOrder": self.sort_order,
            }
        )
        return data
