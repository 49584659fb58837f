"""
Tests for the category tag group configuration (encode/decode, resolution, validation)
"""
import json
import logging
import pytest

from constants import TAG_CONFIG_SEPARATOR
from exceptions import ValidationException
from tag_config import (
    TagGroupConfig,
    available_filter_groups,
    channel_display_tag,
    clone_group_for_import,
    decode_tag_config,
    encode_tag_config,
    parse_selection,
    parse_submitted_groups,
    resolve_display_tags,
    restrict_to_file_groups,
    serialize_selection,
    validate_tag_groups,
)


def _groups(sample_groups):
    return [TagGroupConfig.from_dict(group) for group in sample_groups]


class TestEncodeDecode:
    """Tests for the stored description format"""

    def test_round_trip(self, sample_groups):
        """Decoding an encoded value gives back the description and the groups"""
        groups = _groups(sample_groups)
        decoded = decode_tag_config(encode_tag_config('Community mods', groups))

        assert decoded.description == 'Community mods'
        assert decoded.groups == groups

    def test_idempotent(self, sample_groups):
        """Re-encoding decoded output reproduces the same text"""
        raw = encode_tag_config('Community mods', _groups(sample_groups))
        decoded = decode_tag_config(raw)

        assert encode_tag_config(decoded.description, decoded.groups) == raw

    def test_idempotent_after_id_synthesis(self):
        """Ids synthesized on first decode are stable from then on"""
        raw = 'Text' + TAG_CONFIG_SEPARATOR + json.dumps([{'groupDisplayName': 'Type', 'tags': [{'name': 'RPG'}]}])
        first = decode_tag_config(raw)
        stabilized = encode_tag_config(first.description, first.groups)

        second = decode_tag_config(stabilized)
        assert encode_tag_config(second.description, second.groups) == stabilized
        assert second.groups[0].id == first.groups[0].id

    def test_great_category_scenario(self):
        group = {'groupDisplayName': 'Type', 'tags': [{'name': 'RPG'}], 'appliesToFiles': False, 'sortOrder': 0, 'id': 'g1'}
        raw = encode_tag_config('Great category', [group])

        assert raw.startswith('Great category' + TAG_CONFIG_SEPARATOR + '[{')
        decoded = decode_tag_config(raw)
        assert decoded.description == 'Great category'
        assert len(decoded.groups) == 1
        assert decoded.groups[0].group_display_name == 'Type'
        assert [tag.name for tag in decoded.groups[0].tags] == ['RPG']

    def test_encode_without_groups(self):
        assert encode_tag_config(None, []) is None
        assert encode_tag_config('', []) is None
        assert encode_tag_config('Plain', []) == 'Plain'

    def test_encode_empty_description_with_groups(self, sample_groups):
        raw = encode_tag_config(None, _groups(sample_groups))
        assert raw.startswith(TAG_CONFIG_SEPARATOR)
        assert decode_tag_config(raw).description is None

    def test_encode_rejects_separator_in_description(self, sample_groups):
        with pytest.raises(ValidationException):
            encode_tag_config('bad ' + TAG_CONFIG_SEPARATOR + ' text', _groups(sample_groups))

    def test_decode_empty(self):
        decoded = decode_tag_config(None)
        assert decoded.description is None
        assert decoded.groups == []

    def test_decode_plain_description(self):
        decoded = decode_tag_config('Just text')
        assert decoded.description == 'Just text'
        assert decoded.groups == []

    def test_decode_malformed_json(self):
        """Broken JSON never raises; the description survives"""
        decoded = decode_tag_config('Text' + TAG_CONFIG_SEPARATOR + '[{not json')
        assert decoded.description == 'Text'
        assert decoded.groups == []

    def test_decode_non_list_json(self):
        decoded = decode_tag_config('Text' + TAG_CONFIG_SEPARATOR + '{"id": "g1"}')
        assert decoded.groups == []

    def test_decode_fills_defaults(self):
        raw = TAG_CONFIG_SEPARATOR + json.dumps([{'tags': [{}, 'junk']}, 'junk'])
        group = decode_tag_config(raw).groups[0]

        assert group.id
        assert group.group_display_name == 'Unnamed Group'
        assert group.sort_order == 0
        assert group.applies_to_files is False
        assert len(group.tags) == 1
        assert group.tags[0].name == 'Unnamed Tag'
        assert group.tags[0].id

    def test_decode_keeps_stored_order(self):
        raw = TAG_CONFIG_SEPARATOR + json.dumps(
            [
                {'id': 'b', 'groupDisplayName': 'B', 'sortOrder': 2},
                {'id': 'a', 'groupDisplayName': 'A', 'sortOrder': 1},
            ]
        )
        assert [group.id for group in decode_tag_config(raw).groups] == ['b', 'a']

    def test_round_trip_with_unsorted_groups(self, sample_groups):
        """List order survives even when it disagrees with sortOrder"""
        groups = list(reversed(_groups(sample_groups)))
        decoded = decode_tag_config(encode_tag_config('d', groups))

        assert [group.id for group in decoded.groups] == ['grp_platform', 'grp_type']
        assert decoded.groups == groups

    def test_idempotent_with_unsorted_groups(self, sample_groups):
        raw = encode_tag_config('d', list(reversed(_groups(sample_groups))))
        decoded = decode_tag_config(raw)

        assert encode_tag_config(decoded.description, decoded.groups) == raw

    def test_encode_unserializable_groups(self, caplog):
        """Groups that cannot be written are dropped and the loss is logged"""
        with caplog.at_level(logging.ERROR, logger='main'):
            assert encode_tag_config('d', [{'x': {1, 2}}]) == 'd'
            assert encode_tag_config(None, [{'x': object()}]) is None

        errors = [record for record in caplog.records if record.levelno == logging.ERROR]
        assert len(errors) == 2
        assert 'storing description only' in errors[0].getMessage()

    def test_decode_splits_on_first_separator(self):
        raw = 'Text' + TAG_CONFIG_SEPARATOR + '[]' + TAG_CONFIG_SEPARATOR
        assert decode_tag_config(raw).description == 'Text'

    def test_decode_reads_up_to_second_separator(self):
        group = json.dumps([{'id': 'g1', 'groupDisplayName': 'Type'}])
        raw = 'Text' + TAG_CONFIG_SEPARATOR + group + TAG_CONFIG_SEPARATOR + 'trailing'

        decoded = decode_tag_config(raw)
        assert decoded.description == 'Text'
        assert [g.id for g in decoded.groups] == ['g1']


class TestResolveDisplayTags:
    """Tests for turning selections into display tags"""

    def test_resolves_in_group_then_tag_order(self, sample_groups):
        groups = _groups(sample_groups)
        selection = {'grp_platform': ['tag_linux', 'tag_win'], 'grp_type': ['tag_rpg']}

        tags = resolve_display_tags(selection, groups)

        assert [tag.id for tag in tags] == ['tag_rpg', 'tag_win', 'tag_linux']
        assert tags[0].group_name == 'Type'
        assert tags[0].color == '#ff0000'
        assert tags[0].slug == 'type-rpg-tag_'

    def test_selection_order_does_not_matter(self, sample_groups):
        groups = _groups(sample_groups)
        first = resolve_display_tags({'grp_type': ['tag_fps', 'tag_rpg'], 'grp_platform': ['tag_win']}, groups)
        second = resolve_display_tags({'grp_platform': ['tag_win'], 'grp_type': ['tag_rpg', 'tag_fps']}, groups)

        assert first == second

    def test_orphaned_ids_are_dropped(self, sample_groups):
        groups = _groups(sample_groups)
        groups[0].tags = [tag for tag in groups[0].tags if tag.id != 'tag_rpg']

        tags = resolve_display_tags({'grp_type': ['tag_rpg', 'tag_fps'], 'grp_gone': ['x']}, groups)

        assert [tag.id for tag in tags] == ['tag_fps']

    def test_file_filter(self, sample_groups):
        groups = _groups(sample_groups)
        selection = {'grp_type': ['tag_rpg'], 'grp_platform': ['tag_win']}

        tags = resolve_display_tags(selection, groups, filter_to_file_applicable=True)

        assert [tag.id for tag in tags] == ['tag_win']

    def test_accepts_raw_json_and_garbage(self, sample_groups):
        groups = _groups(sample_groups)
        assert [tag.id for tag in resolve_display_tags('{"grp_type": ["tag_fps"]}', groups)] == ['tag_fps']
        assert resolve_display_tags('not json', groups) == []
        assert resolve_display_tags(None, groups) == []

    def test_channel_display_tag(self):
        tag = channel_display_tag('beta')
        assert tag.type == 'channel'
        assert tag.slug == 'channel-beta'
        assert channel_display_tag('nightly') is None
        assert channel_display_tag(None) is None


class TestSelections:
    """Tests for stored selection helpers"""

    def test_parse_selection_drops_bad_values(self):
        assert parse_selection({'a': ['x', 1], 'b': 'y'}) == {'a': ['x']}
        assert parse_selection('[1, 2]') == {}

    def test_serialize_selection_is_stable(self):
        assert serialize_selection({'b': ['2'], 'a': ['1']}) == '{"a":["1"],"b":["2"]}'

    def test_restrict_to_file_groups(self, sample_groups):
        selection = {'grp_type': ['tag_rpg'], 'grp_platform': ['tag_linux']}
        assert restrict_to_file_groups(selection, _groups(sample_groups)) == {'grp_platform': ['tag_linux']}


class TestValidation:
    """Tests for the category editor payload checks"""

    def test_valid_groups_are_renumbered_and_trimmed(self, sample_groups):
        sample_groups[0]['groupDisplayName'] = '  Type  '
        sample_groups[0]['sortOrder'] = 7
        groups = validate_tag_groups(parse_submitted_groups(sample_groups))

        assert [group.sort_order for group in groups] == [0, 1]
        assert groups[0].group_display_name == 'Type'

    def test_empty_group_name(self, sample_groups):
        sample_groups[1]['groupDisplayName'] = '   '
        with pytest.raises(ValidationException):
            validate_tag_groups(parse_submitted_groups(sample_groups))

    def test_empty_tag_name(self, sample_groups):
        sample_groups[0]['tags'].append({'id': 'tag_empty', 'name': ''})
        with pytest.raises(ValidationException):
            validate_tag_groups(parse_submitted_groups(sample_groups))

    def test_duplicate_tag_names_ignore_case(self, sample_groups):
        sample_groups[0]['tags'].append({'id': 'tag_rpg2', 'name': 'rpg'})
        with pytest.raises(ValidationException):
            validate_tag_groups(parse_submitted_groups(sample_groups))

    def test_same_tag_name_in_two_groups_is_fine(self, sample_groups):
        sample_groups[1]['tags'].append({'id': 'tag_rpg_platform', 'name': 'RPG'})
        assert len(validate_tag_groups(parse_submitted_groups(sample_groups))) == 2

    def test_duplicate_group_ids(self, sample_groups):
        sample_groups[1]['id'] = 'grp_type'
        with pytest.raises(ValidationException):
            validate_tag_groups(parse_submitted_groups(sample_groups))

    def test_payload_must_be_a_list(self):
        with pytest.raises(ValidationException):
            parse_submitted_groups({'id': 'g1'})
        assert parse_submitted_groups(None) == []


class TestImportAndFilters:
    """Tests for group cloning and the filter control payload"""

    def test_clone_keeps_tag_ids_with_new_group_id(self, sample_groups):
        source = _groups(sample_groups)[1]
        clone = clone_group_for_import(source, 5)

        assert clone.id != source.id
        assert clone.sort_order == 5
        assert clone.applies_to_files is True
        assert [tag.id for tag in clone.tags] == [tag.id for tag in source.tags]
        clone.tags[0].name = 'Changed'
        assert source.tags[0].name == 'Windows'

    def test_available_filter_groups(self, sample_groups):
        filters = available_filter_groups(_groups(sample_groups))

        assert [group['displayName'] for group in filters] == ['Type', 'Platform']
        assert filters[1]['appliesToFiles'] is True
        assert filters[0]['tags'][0] == {'id': 'tag_rpg', 'name': 'RPG', 'color': '#ff0000'}
