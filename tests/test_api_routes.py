"""
tests/test_api_routes.py — FastAPI Route Integration Tests
============================================================

Exercises the points and company-configuration routes through the FastAPI
TestClient against an in-memory SQLite database.
"""

from __future__ import annotations

COMPANY = "acme"
ORG = "9b2f4c1e-3a5d-4e6f-8a7b-1c2d3e4f5a6b"

DEFAULT_BASE = {
    "CodeCheckin": 10,
    "PullRequest": 25,
    "CodeReview": 15,
    "BugFix": 20,
    "StoryClosure": 30,
}


def _activity(**changes) -> dict:
    body = {
        "kind": "PullRequest",
        "isAiGenerated": True,
        "organizationId": ORG,
        "companyId": COMPANY,
    }
    body.update(changes)
    return body


# ===========================================================================
# Health
# ===========================================================================
class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


# ===========================================================================
# Points
# ===========================================================================
class TestDefaultsAndValidate:
    def test_defaults(self, client):
        data = client.get("/api/points/defaults").json()
        assert data["basePoints"] == DEFAULT_BASE
        assert data["aiModifier"] == 0.75
        assert data["orgOverrides"] == {}
        assert data["levelThresholds"]["1"] == 0
        assert data["version"] == 1

    def test_validate_defaults(self, client):
        resp = client.post("/api/points/validate", json={
            "basePoints": DEFAULT_BASE, "aiModifier": 0.75, "orgOverrides": {},
        })
        assert resp.status_code == 200
        assert resp.json() == {"valid": True, "errors": []}

    def test_validate_reports_all_errors(self, client):
        resp = client.post("/api/points/validate", json={
            "basePoints": {**DEFAULT_BASE, "CodeCheckin": 3},
            "aiModifier": 1.5,
            "orgOverrides": {"org-1": {"BugFix": 15}},
        })
        data = resp.json()
        assert data["valid"] is False
        assert sorted(e["code"] for e in data["errors"]) == [
            "below_default_floor",
            "invalid_ai_modifier",
            "invalid_organization_id",
            "out_of_range",
        ]


class TestCalculate:
    def test_calculate_without_stored_config_uses_defaults(self, client):
        resp = client.post("/api/points/calculate", json=_activity())
        assert resp.status_code == 200
        data = resp.json()
        assert data["finalPoints"] == 19
        assert data["steps"] == ["base=25", "ai_modifier=0.75", "final=round(18.75)=19"]

    def test_calculate_human_activity(self, client):
        resp = client.post("/api/points/calculate", json=_activity(kind="CodeCheckin", isAiGenerated=False))
        assert resp.json()["finalPoints"] == 10

    def test_unknown_kind_is_422(self, client):
        resp = client.post("/api/points/calculate", json=_activity(kind="Deployment"))
        assert resp.status_code == 422

    def test_calculate_does_not_provision(self, client):
        client.post("/api/points/calculate", json=_activity())
        assert client.get(f"/api/companies/{COMPANY}/points-config").status_code == 404


class TestAward:
    def test_award_and_duplicate(self, client):
        body = _activity(teamMemberId="dev-1", activityId="pr-101")
        first = client.post("/api/points/award", json=body).json()
        assert first["duplicate"] is False
        assert first["result"]["finalPoints"] == 19

        second = client.post("/api/points/award", json=body).json()
        assert second["duplicate"] is True
        assert second["result"]["finalPoints"] == 19

    def test_award_requires_member(self, client):
        resp = client.post("/api/points/award", json=_activity(activityId="pr-1"))
        assert resp.status_code == 422


# ===========================================================================
# Company configuration
# ===========================================================================
class TestCompanyConfig:
    def test_missing_config_is_404(self, client):
        assert client.get(f"/api/companies/{COMPANY}/points-config").status_code == 404

    def test_provision_then_get(self, client):
        resp = client.post(f"/api/companies/{COMPANY}/points-config/provision")
        assert resp.status_code == 200
        assert resp.json()["version"] == 1
        assert client.get(f"/api/companies/{COMPANY}/points-config").json()["basePoints"] == DEFAULT_BASE

    def test_replace_config(self, client):
        client.post(f"/api/companies/{COMPANY}/points-config/provision")
        resp = client.put(f"/api/companies/{COMPANY}/points-config", json={
            "basePoints": DEFAULT_BASE,
            "aiModifier": 0.5,
            "orgOverrides": {ORG: {"BugFix": 15}},
            "version": 1,
            "actorId": "admin-7",
            "reason": "Halve AI credit",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["version"] == 2
        assert data["aiModifier"] == 0.5
        assert data["orgOverrides"] == {ORG: {"BugFix": 15}}

    def test_replace_with_stale_version_is_409(self, client):
        client.post(f"/api/companies/{COMPANY}/points-config/provision")
        body = {"basePoints": DEFAULT_BASE, "aiModifier": 0.5, "version": 1}
        assert client.put(f"/api/companies/{COMPANY}/points-config", json=body).status_code == 200

        resp = client.put(f"/api/companies/{COMPANY}/points-config", json=body)
        assert resp.status_code == 409
        assert resp.json()["detail"]["currentVersion"] == 2

    def test_replace_invalid_is_422_with_errors(self, client):
        client.post(f"/api/companies/{COMPANY}/points-config/provision")
        resp = client.put(f"/api/companies/{COMPANY}/points-config", json={
            "basePoints": {**DEFAULT_BASE, "PullRequest": 10},
            "version": 1,
        })
        assert resp.status_code == 422
        errors = resp.json()["detail"]["errors"]
        assert [e["code"] for e in errors] == ["below_default_floor"]
        assert errors[0]["field"] == "basePoints.PullRequest"

    def test_replace_without_version_is_422(self, client):
        client.post(f"/api/companies/{COMPANY}/points-config/provision")
        resp = client.put(f"/api/companies/{COMPANY}/points-config", json={"basePoints": DEFAULT_BASE})
        assert resp.status_code == 422
        assert resp.json()["detail"]["errors"][0]["code"] == "invalid_version"

    def test_replace_unprovisioned_is_404(self, client):
        resp = client.put(f"/api/companies/{COMPANY}/points-config", json={
            "basePoints": DEFAULT_BASE, "version": 1,
        })
        assert resp.status_code == 404


class TestEffectiveConfig:
    def test_effective_config_applies_override(self, client):
        client.post(f"/api/companies/{COMPANY}/points-config/provision")
        client.put(f"/api/companies/{COMPANY}/points-config", json={
            "basePoints": DEFAULT_BASE,
            "orgOverrides": {ORG: {"BugFix": 5}},
            "version": 1,
        })
        data = client.get(f"/api/companies/{COMPANY}/organizations/{ORG}/effective-config").json()
        assert data["effectiveBasePoints"] == {**DEFAULT_BASE, "BugFix": 5}
        assert data["aiModifier"] == 0.75

    def test_effective_config_refreshes_after_update(self, client):
        client.post(f"/api/companies/{COMPANY}/points-config/provision")
        url = f"/api/companies/{COMPANY}/organizations/{ORG}/effective-config"
        assert client.get(url).json()["effectiveBasePoints"]["BugFix"] == 20

        client.put(f"/api/companies/{COMPANY}/points-config", json={
            "basePoints": {**DEFAULT_BASE, "BugFix": 35}, "version": 1,
        })
        assert client.get(url).json()["effectiveBasePoints"]["BugFix"] == 35

    def test_effective_config_missing_company(self, client):
        resp = client.get(f"/api/companies/{COMPANY}/organizations/{ORG}/effective-config")
        assert resp.status_code == 404


class TestProgress:
    def test_progress_after_awards(self, client):
        for i in range(2):
            client.post("/api/points/award", json=_activity(
                kind="StoryClosure", isAiGenerated=False,
                teamMemberId="dev-1", activityId=f"story-{i}",
            ))
        data = client.get(f"/api/companies/{COMPANY}/members/dev-1/progress").json()
        assert data["teamMemberId"] == "dev-1"
        assert data["totalPoints"] == 60
        assert data["currentLevel"] == 1
        assert data["nextLevelThreshold"] == 500
        assert data["pointsToNextLevel"] == 440
        assert data["progressPercentage"] == 12.0
