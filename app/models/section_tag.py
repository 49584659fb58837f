"""
Model: SectionTag
Project-level tag pool, one pool per item type.
"""

from db import db, now_utc


class SectionTag(db.Model):
    __tablename__ = "section_tags"

    id = db.Column(db.String, primary_key=True)
    item_type = db.Column(db.String(20), nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    slug = db.Column(db.String, nullable=False)
    description = db.Column(db.Text)
    color = db.Column(db.String)
    text_color = db.Column(db.String)
    border_color = db.Column(db.String)
    hover_bg_color = db.Column(db.String)
    hover_text_color = db.Column(db.String)
    hover_border_color = db.Column(db.String)
    icon_svg = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    __table_args__ = (db.UniqueConstraint("item_type", "slug", name="uq_section_tags_type_slug"),)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "color": self.color,
            "text_color": self.text_color,
            "border_color": self.border_color,
            "hover_bg_color": self.hover_bg_color,
            "hover_text_color": self.hover_text_color,
            "hover_border_color": self.hover_border_color,
            "icon_svg": self.icon_svg,
            "type": "section",
        }
