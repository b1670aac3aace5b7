"""
tests/test_resolver.py — Effective Config Resolution
=====================================================

Organization override > company config > system default.
"""

from __future__ import annotations

import logging

import pytest

from codequest.engine.activities import DEFAULT_BASE_POINTS, ActivityKind, default_base_points
from codequest.engine.points import calculate
from codequest.engine.points_config import PointsConfig
from codequest.engine.resolver import EffectiveConfig, resolve_effective_config

ORG = "9b2f4c1e-3a5d-4e6f-8a7b-1c2d3e4f5a6b"
OTHER_ORG = "0d8e7f6a-5b4c-4d3e-9f2a-1b0c9d8e7f6a"


@pytest.fixture
def company_config():
    base = default_base_points()
    base[ActivityKind.BUG_FIX] = 20
    return PointsConfig(
        base_points=base,
        ai_modifier=0.75,
        org_overrides={"org-1": {ActivityKind.BUG_FIX: 15}},
    )


class TestPrecedence:
    def test_org_override_wins(self, company_config):
        effective = resolve_effective_config(company_config, "org-1")
        assert effective.effective_base_points[ActivityKind.BUG_FIX] == 15

    def test_minimum_override_with_defaults(self):
        config = PointsConfig(
            base_points=default_base_points(),
            org_overrides={"org-1": {ActivityKind.BUG_FIX: 5}},
        )
        effective = resolve_effective_config(config, "org-1")
        expected = default_base_points()
        expected[ActivityKind.BUG_FIX] = 5
        assert effective.effective_base_points == expected

    def test_org_without_override_matches_company_table(self, company_config):
        effective = resolve_effective_config(company_config, "org-2")
        assert effective.effective_base_points == dict(company_config.base_points)

    def test_other_kinds_fall_through_to_company(self, company_config):
        effective = resolve_effective_config(company_config, "org-1")
        assert effective.effective_base_points[ActivityKind.PULL_REQUEST] == 25

    def test_unknown_org_uses_company_table(self, company_config):
        effective = resolve_effective_config(company_config, "org-2")
        assert effective.effective_base_points[ActivityKind.BUG_FIX] == 20

    def test_override_applies_only_to_its_org(self):
        config = PointsConfig(
            base_points=default_base_points(),
            org_overrides={ORG: {ActivityKind.CODE_REVIEW: 40}},
        )
        assert resolve_effective_config(config, ORG).effective_base_points[ActivityKind.CODE_REVIEW] == 40
        assert resolve_effective_config(config, OTHER_ORG).effective_base_points[ActivityKind.CODE_REVIEW] == 15

    def test_company_value_overrides_default(self):
        base = default_base_points()
        base[ActivityKind.STORY_CLOSURE] = 50
        config = PointsConfig(base_points=base)
        effective = resolve_effective_config(config, ORG)
        assert effective.effective_base_points[ActivityKind.STORY_CLOSURE] == 50

    def test_modifier_comes_from_company(self, company_config):
        effective = resolve_effective_config(company_config, "org-1")
        assert effective.ai_modifier == 0.75


class TestTotality:
    @pytest.mark.parametrize("org", ["org-1", "org-2", ORG, ""])
    def test_every_kind_resolves(self, company_config, org):
        effective = resolve_effective_config(company_config, org)
        assert set(effective.effective_base_points) == set(ActivityKind)

    def test_missing_company_value_uses_default(self, caplog):
        base = default_base_points()
        del base[ActivityKind.CODE_REVIEW]
        config = PointsConfig(base_points=base)
        with caplog.at_level(logging.WARNING, logger="codequest.engine.resolver"):
            effective = resolve_effective_config(config, ORG)
        assert effective.effective_base_points[ActivityKind.CODE_REVIEW] == DEFAULT_BASE_POINTS[ActivityKind.CODE_REVIEW]
        assert "CodeReview" in caplog.text

    def test_empty_company_table_uses_all_defaults(self):
        effective = resolve_effective_config(PointsConfig(base_points={}), ORG)
        assert effective.effective_base_points == DEFAULT_BASE_POINTS

    def test_non_numeric_override_is_skipped(self):
        config = PointsConfig(
            base_points=default_base_points(),
            org_overrides={ORG: {ActivityKind.BUG_FIX: "lots"}},
        )
        effective = resolve_effective_config(config, ORG)
        assert effective.effective_base_points[ActivityKind.BUG_FIX] == 20

    def test_resolution_does_not_mutate_config(self, company_config):
        before = dict(company_config.base_points)
        resolve_effective_config(company_config, "org-1")
        assert company_config.base_points == before


class TestResolveThenCalculate:
    def test_override_feeds_calculation(self, company_config):
        effective = resolve_effective_config(company_config, "org-1")
        result = calculate(
            ActivityKind.BUG_FIX, False,
            effective.effective_base_points, effective.ai_modifier,
        )
        assert result.final_points == 15

    def test_other_org_gets_company_value(self, company_config):
        effective = resolve_effective_config(company_config, "org-2")
        result = calculate(
            ActivityKind.BUG_FIX, False,
            effective.effective_base_points, effective.ai_modifier,
        )
        assert result.final_points == 20


class TestEffectiveConfigSerialization:
    def test_to_dict(self):
        effective = EffectiveConfig(
            effective_base_points={ActivityKind.BUG_FIX: 15}, ai_modifier=0.6
        )
        assert effective.to_dict() == {
            "effectiveBasePoints": {"BugFix": 15},
            "aiModifier": 0.6,
        }
