"""
tests/test_activities.py — Activity Kind Registry
==================================================
"""

from __future__ import annotations

import pytest

from codequest.engine.activities import (
    DEFAULT_BASE_POINTS,
    ActivityKind,
    ActivityRecord,
    default_base_points,
    is_valid_kind,
    parse_kind,
)


class TestActivityKind:
    def test_five_kinds(self):
        assert [k.value for k in ActivityKind] == [
            "CodeCheckin", "PullRequest", "CodeReview", "BugFix", "StoryClosure",
        ]

    def test_kind_compares_equal_to_its_string(self):
        assert ActivityKind.PULL_REQUEST == "PullRequest"

    @pytest.mark.parametrize("value", ["CodeCheckin", "StoryClosure"])
    def test_known_strings_are_valid(self, value):
        assert is_valid_kind(value)

    @pytest.mark.parametrize("value", ["codecheckin", "Deployment", "", None, 3])
    def test_unknown_values_are_invalid(self, value):
        assert not is_valid_kind(value)

    def test_parse_kind(self):
        assert parse_kind("BugFix") is ActivityKind.BUG_FIX

    def test_parse_kind_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown activity kind"):
            parse_kind("Deployment")


class TestDefaultBasePoints:
    def test_defaults(self):
        assert DEFAULT_BASE_POINTS == {
            ActivityKind.CODE_CHECKIN: 10,
            ActivityKind.PULL_REQUEST: 25,
            ActivityKind.CODE_REVIEW: 15,
            ActivityKind.BUG_FIX: 20,
            ActivityKind.STORY_CLOSURE: 30,
        }

    def test_copy_does_not_alias_defaults(self):
        table = default_base_points()
        table[ActivityKind.BUG_FIX] = 99
        assert DEFAULT_BASE_POINTS[ActivityKind.BUG_FIX] == 20


class TestActivityRecord:
    def test_record_is_immutable(self):
        record = ActivityRecord(ActivityKind.CODE_REVIEW, False, "org", "company")
        with pytest.raises(AttributeError):
            record.kind = ActivityKind.BUG_FIX
