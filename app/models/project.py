"""
Model: Project
Stored in the "items" table. A project owns categories, which own resources.
"""

from db import db, now_utc
from constants import STATUS_PUBLISHED


project_section_tags = db.Table(
    "project_section_tags",
    db.Column("project_id", db.String, db.ForeignKey("items.id", ondelete="CASCADE"), primary_key=True),
    db.Column("section_tag_id", db.String, db.ForeignKey("section_tags.id", ondelete="CASCADE"), primary_key=True),
)


class Project(db.Model):
    __tablename__ = "items"

    id = db.Column(db.String, primary_key=True)
    name = db.Column(db.String, nullable=False)
    slug = db.Column(db.String, nullable=False, index=True)
    description = db.Column(db.Text)
    long_description = db.Column(db.Text)
    banner_url = db.Column(db.String)
    icon_url = db.Column(db.String)
    item_type = db.Column(db.String(20), nullable=False, index=True)  # game, web, app, art-music
    project_url = db.Column(db.String)
    author_display_name = db.Column(db.String)
    status = db.Column(db.String(20), default=STATUS_PUBLISHED)
    followers_count = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    categories = db.relationship(
        "Category",
        backref="project",
        cascade="all, delete",
        order_by="(Category.sort_order, Category.name)",
    )
    resources = db.relationship("Resource", backref="project", cascade="all, delete")
    section_tags = db.relationship("SectionTag", secondary=project_section_tags, order_by="SectionTag.name")

    __table_args__ = (db.UniqueConstraint("item_type", "slug", name="uq_items_type_slug"),)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "longDescription": self.long_description,
            "bannerUrl": self.banner_url,
            "iconUrl": self.icon_url,
            "itemType": self.item_type,
            "projectUrl": self.project_url,
            "authorDisplayName": self.author_display_name,
            "status": self.status,
            "followersCount": self.followers_count or 0,
            "tags": [tag.to_dict() for tag in self.section_tags],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
