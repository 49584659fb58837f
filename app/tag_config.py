"""
Per-category tag group configuration.

A category stores its free-text description and its tag groups in a single
text column:

    "<description>:::CONFIG_JSON:::<json array of groups>"

Resources and files store their picks as ``{groupId: [tagId, ...]}`` JSON and
are resolved against the live groups at read time, so renamed or deleted
tags simply stop showing up.

Everything in this module is pure: no database, no Flask app.
"""
from __future__ import annotations

import copy
import json
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from constants import FILE_CHANNELS, TAG_CONFIG_SEPARATOR
from exceptions import ValidationException
from utils import generate_id

# Retrieve main logger
logger = logging.getLogger("main")

UNNAMED_GROUP = "Unnamed Group"
UNNAMED_TAG = "Unnamed Tag"

TAG_STYLE_FIELDS = (
    "color",
    "text_color",
    "border_color",
    "hover_bg_color",
    "hover_text_color",
    "hover_border_color",
    "icon_svg",
)

# Compact output, same bytes as the stored format has always used
_JSON_SEPARATORS = (",", ":")


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _style_value(value) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass
class TagInGroup:
    id: str
    name: str
    color: Optional[str] = None
    text_color: Optional[str] = None
    border_color: Optional[str] = None
    hover_bg_color: Optional[str] = None
    hover_text_color: Optional[str] = None
    hover_border_color: Optional[str] = None
    icon_svg: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fill_defaults: bool = True) -> "TagInGroup":
        tag_id = data.get("id")
        if not isinstance(tag_id, str) or not tag_id:
            tag_id = generate_id("tag")
        name = data.get("name")
        if not isinstance(name, str):
            name = ""
        if fill_defaults and not name:
            name = UNNAMED_TAG
        styles = {key: _style_value(data.get(key)) for key in TAG_STYLE_FIELDS}
        return cls(id=tag_id, name=name, **styles)

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name}
        for key in TAG_STYLE_FIELDS:
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class TagGroupConfig:
    id: str
    group_display_name: str
    sort_order: float = 0
    applies_to_files: bool = False
    tags: List[TagInGroup] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], fill_defaults: bool = True) -> "TagGroupConfig":
        """
        Build a group from its stored/wire form (camelCase keys).

        With fill_defaults (reading stored data) missing names become
        "Unnamed Group"/"Unnamed Tag". Without it (reading a submitted
        editor payload) names are kept as given so validation can reject them.
        """
        group_id = data.get("id")
        if not isinstance(group_id, str) or not group_id:
            group_id = generate_id("group")

        name = data.get("groupDisplayName")
        if not isinstance(name, str):
            name = ""
        if fill_defaults and not name:
            name = UNNAMED_GROUP

        sort_order = data.get("sortOrder")
        if not _is_number(sort_order):
            sort_order = 0

        applies_to_files = data.get("appliesToFiles")
        if not isinstance(applies_to_files, bool):
            applies_to_files = False

        raw_tags = data.get("tags")
        if not isinstance(raw_tags, list):
            raw_tags = []
        tags = [TagInGroup.from_dict(tag, fill_defaults) for tag in raw_tags if isinstance(tag, dict)]

        return cls(
            id=group_id,
            group_display_name=name,
            sort_order=sort_order,
            applies_to_files=applies_to_files,
            tags=tags,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "groupDisplayName": self.group_display_name,
            "sortOrder": self.sort_order,
            "appliesToFiles": self.applies_to_files,
            "tags": [tag.to_dict() for tag in self.tags],
        }


@dataclass
class DecodedTagConfig:
    description: Optional[str]
    groups: List[TagGroupConfig] = field(default_factory=list)


@dataclass
class ProjectTagGroupSource:
    """A tag group as found in one category of a project, offered for import."""

    source_category_id: str
    source_category_name: str
    group_config: TagGroupConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceCategoryId": self.source_category_id,
            "sourceCategoryName": self.source_category_name,
            "groupConfig": self.group_config.to_dict(),
        }


@dataclass
class DisplayTag:
    id: str
    name: str
    slug: str
    type: str = "misc"
    description: Optional[str] = None
    group_id: Optional[str] = None
    group_name: Optional[str] = None
    color: Optional[str] = None
    text_color: Optional[str] = None
    border_color: Optional[str] = None
    hover_bg_color: Optional[str] = None
    hover_text_color: Optional[str] = None
    hover_border_color: Optional[str] = None
    icon_svg: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "type": self.type,
            "description": self.description,
            "groupId": self.group_id,
            "groupName": self.group_name,
            "color": self.color,
            "text_color": self.text_color,
            "border_color": self.border_color,
            "hover_bg_color": self.hover_bg_color,
            "hover_text_color": self.hover_text_color,
            "hover_border_color": self.hover_border_color,
            "icon_svg": self.icon_svg,
        }


def _sorted_groups(groups: List[TagGroupConfig]) -> List[TagGroupConfig]:
    return sorted(groups, key=lambda group: group.sort_order)


def encode_tag_config(description: Optional[str], groups) -> Optional[str]:
    """
    Combine a category description and its tag groups into the stored text.

    Groups may be TagGroupConfig instances or already-serialized dicts.
    """
    description = description or ""
    if TAG_CONFIG_SEPARATOR in description:
        raise ValidationException(f"Description must not contain '{TAG_CONFIG_SEPARATOR}'.")

    if not groups:
        return description or None

    try:
        payload = json.dumps(
            [group.to_dict() if isinstance(group, TagGroupConfig) else group for group in groups],
            separators=_JSON_SEPARATORS,
            ensure_ascii=False,
        )
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to serialize tag group configuration, storing description only: {e}")
        return description or None

    return description + TAG_CONFIG_SEPARATOR + payload


def decode_tag_config(raw: Optional[str]) -> DecodedTagConfig:
    """
    Split stored category text into description and groups. Never raises.

    Groups keep their stored order; callers that display them sort by sort_order.
    """
    if not raw:
        return DecodedTagConfig(description=None, groups=[])

    # Only the segment between the first and second separator is configuration
    parts = raw.split(TAG_CONFIG_SEPARATOR)
    description = parts[0] or None
    payload = parts[1] if len(parts) > 1 else ""
    if not payload:
        return DecodedTagConfig(description=description, groups=[])

    try:
        parsed = json.loads(payload)
    except ValueError as e:
        logger.warning(f"Ignoring malformed tag group configuration: {e}")
        return DecodedTagConfig(description=description, groups=[])

    if not isinstance(parsed, list):
        logger.warning("Ignoring tag group configuration that is not a list")
        return DecodedTagConfig(description=description, groups=[])

    groups = [TagGroupConfig.from_dict(item) for item in parsed if isinstance(item, dict)]
    return DecodedTagConfig(description=description, groups=groups)


def parse_submitted_groups(payload) -> List[TagGroupConfig]:
    """Read the group list sent by the category editor."""
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValidationException("tagGroupConfigs must be a list.")
    groups = []
    for item in payload:
        if not isinstance(item, dict):
            raise ValidationException("Each tag group must be an object.")
        groups.append(TagGroupConfig.from_dict(item, fill_defaults=False))
    return groups


def validate_tag_groups(groups: List[TagGroupConfig]) -> List[TagGroupConfig]:
    """
    Check a submitted group list and return it ready to store: names trimmed
    and sort_order renumbered to the list position.
    """
    seen_ids = set()
    validated = []
    for index, group in enumerate(groups):
        group_name = (group.group_display_name or "").strip()
        if not group_name:
            raise ValidationException(f"Tag group #{index + 1} needs a display name.")
        if group.id in seen_ids:
            raise ValidationException(f"Duplicate tag group id '{group.id}'.")
        seen_ids.add(group.id)

        seen_names = set()
        tags = []
        for tag in group.tags:
            tag_name = (tag.name or "").strip()
            if not tag_name:
                raise ValidationException(f"Tag group '{group_name}' contains a tag without a name.")
            if tag_name.lower() in seen_names:
                raise ValidationException(f"Tag group '{group_name}' has more than one tag named '{tag_name}'.")
            seen_names.add(tag_name.lower())
            tags.append(replace(tag, name=tag_name))

        validated.append(replace(group, group_display_name=group_name, sort_order=index, tags=tags))
    return validated


def clone_group_for_import(group: TagGroupConfig, sort_order) -> TagGroupConfig:
    """Copy of a group from another category: new group id, tag ids kept."""
    tags = []
    for tag in group.tags:
        cloned = copy.deepcopy(tag)
        if not cloned.id:
            cloned.id = generate_id("tag")
        tags.append(cloned)
    return TagGroupConfig(
        id=generate_id("group"),
        group_display_name=group.group_display_name,
        sort_order=sort_order,
        applies_to_files=group.applies_to_files,
        tags=tags,
    )


def parse_selection(raw) -> Dict[str, List[str]]:
    """
    Read a stored {groupId: [tagId]} selection. Bad JSON or a non-object
    gives {}; keys whose value is not a list are dropped.
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed tag selection JSON")
            return {}
    if not isinstance(raw, dict):
        return {}

    selection = {}
    for group_id, tag_ids in raw.items():
        if not isinstance(tag_ids, list):
            continue
        selection[str(group_id)] = [tag_id for tag_id in tag_ids if isinstance(tag_id, str)]
    return selection


def serialize_selection(selection) -> str:
    return json.dumps(parse_selection(selection), sort_keys=True, separators=_JSON_SEPARATORS)


def restrict_to_file_groups(selection, groups: List[TagGroupConfig]) -> Dict[str, List[str]]:
    """Drop picks for groups that do not apply to files."""
    file_group_ids = {group.id for group in groups if group.applies_to_files}
    return {group_id: tag_ids for group_id, tag_ids in parse_selection(selection).items() if group_id in file_group_ids}


def _dash(text: str) -> str:
    return re.sub(r"\s+", "-", (text or "").lower())


def tag_slug(tag: TagInGroup, group: TagGroupConfig) -> str:
    return f"{_dash(group.group_display_name)}-{_dash(tag.name)}-{tag.id[:4]}"


def to_display_tag(tag: TagInGroup, group: TagGroupConfig) -> DisplayTag:
    return DisplayTag(
        id=tag.id,
        name=tag.name,
        slug=tag_slug(tag, group),
        group_id=group.id,
        group_name=group.group_display_name,
        **{key: getattr(tag, key) for key in TAG_STYLE_FIELDS},
    )


def resolve_display_tags(selection, groups: List[TagGroupConfig], filter_to_file_applicable: bool = False) -> List[DisplayTag]:
    """
    Turn a selection into display tags.

    Output follows the category's group order, then each group's tag order;
    the order of the selection itself never matters. Unknown groups and tags
    are skipped.
    """
    selection = parse_selection(selection)
    resolved = []
    for group in _sorted_groups(groups):
        if filter_to_file_applicable and not group.applies_to_files:
            continue
        selected_ids = selection.get(group.id)
        if not selected_ids:
            continue
        selected_ids = set(selected_ids)
        for tag in group.tags:
            if tag.id in selected_ids:
                resolved.append(to_display_tag(tag, group))
    return resolved


def channel_display_tag(channel_id: Optional[str]) -> Optional[DisplayTag]:
    """Display tag for a file release channel, or None for unknown channels."""
    if not channel_id:
        return None
    for channel in FILE_CHANNELS:
        if channel["id"] == channel_id:
            return DisplayTag(
                id=channel["id"],
                name=channel["name"],
                slug=f"channel-{channel['id']}",
                type="channel",
                description=channel["description"],
                color=channel["color"],
                text_color=channel["text_color"],
                border_color=channel["border_color"],
                hover_bg_color=channel["color"],
                hover_text_color=channel["text_color"],
                hover_border_color=channel["border_color"],
            )
    return None


def available_filter_groups(groups: List[TagGroupConfig]) -> List[Dict[str, Any]]:
    """Groups as offered to the resource filter controls."""
    return [
        {
            "id": group.id,
            "displayName": group.group_display_name,
            "tags": [tag.to_dict() for tag in group.tags],
            "appliesToFiles": bool(group.applies_to_files),
        }
        for group in _sorted_groups(groups)
    ]
