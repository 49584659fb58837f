"""
Model: Category
The description column holds both the free text and the tag group
configuration (see tag_config).
"""

from db import db, now_utc
from tag_config import decode_tag_config


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.String, primary_key=True)
    name = db.Column(db.String, nullable=False)
    slug = db.Column(db.String, nullable=False)
    description = db.Column(db.Text)
    parent_item_id = db.Column(db.String, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    sort_order = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    resources = db.relationship("Resource", backref="category", cascade="all, delete")

    __table_args__ = (db.UniqueConstraint("parent_item_id", "slug", name="uq_categories_item_slug"),)

    @property
    def tag_config(self):
        return decode_tag_config(self.description)

    def to_dict(self):
        decoded = self.tag_config
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": decoded.description,
            "parentItemId": self.parent_item_id,
            "sortOrder": self.sort_order,
            "tagGroupConfigs": [group.to_dict() for group in decoded.groups],
            "rawDescription": self.description,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
