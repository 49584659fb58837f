"""
Model: ResourceFile, ChangelogEntry
"""

from db import db, now_utc


class ResourceFile(db.Model):
    __tablename__ = "resource_files"

    id = db.Column(db.String, primary_key=True)
    resource_id = db.Column(db.String, db.ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    url = db.Column(db.String, nullable=False)
    version_name = db.Column(db.String)
    size = db.Column(db.String)
    channel_id = db.Column(db.String(20))  # release, beta, alpha
    selected_file_tags_json = db.Column(db.Text)
    downloads = db.Column(db.Integer, default=0)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    changelog_entry = db.relationship(
        "ChangelogEntry",
        uselist=False,
        backref="resource_file",
        cascade="all, delete-orphan",
    )


class ChangelogEntry(db.Model):
    __tablename__ = "changelog_entries"

    id = db.Column(db.String, primary_key=True)
    resource_id = db.Column(db.String, db.ForeignKey("resources.id", ondelete="CASCADE"), nullable=False, index=True)
    resource_file_id = db.Column(db.String, db.ForeignKey("resource_files.id", ondelete="SET NULL"), index=True)
    version_name = db.Column(db.String)
    date = db.Column(db.Date)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=now_utc)
    updated_at = db.Column(db.DateTime, default=now_utc, onupdate=now_utc)

    def to_dict(self):
        return {
            "id": self.id,
            "resourceId": self.resource_id,
            "resourceFileId": self.resource_file_id,
            "versionName": self.version_name,
            "date": self.date.isoformat() if self.date else None,
            "notes": self.notes,
        }
