"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end.
"""

import pytest
from unittest.mock import patch


DAILY = {"unit": "day", "interval": 1}


class TestHealth:
    def test_health(self, test_client):
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestPreviewEndpoint:
    """Test POST /recurrence/preview."""

    def test_preview_daily(self, test_client):
        response = test_client.post(
            "/recurrence/preview",
            json={"anchor": "2025-01-13T09:00:00", "rule": DAILY, "limit": 3},
        )
        assert response.status_code == 200
        assert response.json()["occurrences"] == [
            "2025-01-13T09:00:00",
            "2025-01-14T09:00:00",
            "2025-01-15T09:00:00",
        ]

    def test_preview_default_limit(self, test_client):
        response = test_client.post("/recurrence/preview", json={"anchor": "2025-01-13T09:00:00", "rule": DAILY})
        assert response.status_code == 200
        assert len(response.json()["occurrences"]) == 20

    def test_preview_without_rule(self, test_client):
        response = test_client.post("/recurrence/preview", json={"anchor": "2025-01-13T09:00:00", "rule": None})
        assert response.status_code == 200
        assert response.json()["occurrences"] == []

    def test_preview_with_holiday_dates(self, test_client):
        """Jan 1 2025 is moved to the next working day."""
        rule = {
            "unit": "year",
            "adjustment": {
                "weekday_conditions": [
                    {
                        "id": "h1",
                        "if_weekday": "holiday",
                        "then_direction": "next",
                        "then_target": "non_weekend_holiday",
                    }
                ]
            },
        }
        response = test_client.post(
            "/recurrence/preview",
            json={"anchor": "2025-01-01T00:00:00", "rule": rule, "limit": 1, "holiday_dates": ["2025-01-01"]},
        )
        assert response.status_code == 200
        assert response.json()["occurrences"] == ["2025-01-02T00:00:00"]

    def test_invalid_rule_rejected(self, test_client):
        response = test_client.post(
            "/recurrence/preview",
            json={"anchor": "2025-01-13T09:00:00", "rule": {"unit": "day", "interval": 0}},
        )
        assert response.status_code == 422

    def test_details_on_day_rule_rejected(self, test_client):
        response = test_client.post(
            "/recurrence/preview",
            json={"anchor": "2025-01-13T09:00:00", "rule": {"unit": "day", "details": {"specific_date": 3}}},
        )
        assert response.status_code == 422

    def test_oracle_failure_returns_500(self, test_client):
        rule = {
            "unit": "day",
            "adjustment": {
                "weekday_conditions": [
                    {"id": "h1", "if_weekday": "holiday", "then_direction": "next", "then_target": "weekday"}
                ]
            },
        }
        with patch(
            "taskrecur.engine.holidays.FixedHolidayOracle.is_holiday",
            side_effect=RuntimeError("calendar unavailable"),
        ):
            response = test_client.post(
                "/recurrence/preview",
                json={"anchor": "2025-01-13T09:00:00", "rule": rule, "holiday_dates": []},
            )
        assert response.status_code == 500
        assert "calendar unavailable" in response.json()["detail"]


class TestNextEndpoint:
    """Test POST /recurrence/next."""

    def test_next_weekly(self, test_client):
        response = test_client.post(
            "/recurrence/next",
            json={"base": "2025-01-13T09:00:00", "rule": {"unit": "week"}},
        )
        assert response.status_code == 200
        assert response.json()["next"] == "2025-01-20T09:00:00"

    def test_next_after_end(self, test_client):
        response = test_client.post(
            "/recurrence/next",
            json={"base": "2025-01-13T09:00:00", "rule": {**DAILY, "end_date": "2025-01-13T09:00:00"}},
        )
        assert response.status_code == 200
        assert response.json()["next"] is None


class TestItemRecurrenceEndpoints:
    """Test task and sub-task recurrence association."""

    @pytest.mark.parametrize("kind", ["tasks", "subtasks"])
    def test_put_then_get(self, test_client, test_user_id, kind):
        url = f"/projects/p1/{kind}/item-1/recurrence"
        put = test_client.put(url, json={"rule": {"unit": "month", "interval": 2}, "user_id": test_user_id})
        assert put.status_code == 200
        saved = put.json()["rule"]
        assert saved["id"]
        assert saved["unit"] == "month"

        get = test_client.get(url)
        assert get.status_code == 200
        assert get.json()["rule"] == saved

    def test_get_missing_returns_404(self, test_client):
        response = test_client.get("/projects/p1/tasks/unknown/recurrence")
        assert response.status_code == 404

    def test_clear_recurrence(self, test_client, test_user_id):
        url = "/projects/p1/tasks/item-1/recurrence"
        test_client.put(url, json={"rule": DAILY, "user_id": test_user_id})
        cleared = test_client.put(url, json={"rule": None, "user_id": test_user_id})
        assert cleared.status_code == 200
        assert cleared.json()["rule"] is None
        assert test_client.get(url).status_code == 404

    def test_task_and_subtask_do_not_collide(self, test_client, test_user_id):
        test_client.put("/projects/p1/tasks/item-1/recurrence", json={"rule": DAILY, "user_id": test_user_id})
        assert test_client.get("/projects/p1/subtasks/item-1/recurrence").status_code == 404

    def test_invalid_rule_rejected(self, test_client, test_user_id):
        response = test_client.put(
            "/projects/p1/tasks/item-1/recurrence",
            json={"rule": {"unit": "week", "days_of_week": ["someday"]}, "user_id": test_user_id},
        )
        assert response.status_code == 422


class TestTimezoneRequests:
    """Requests mixing UTC and naive datetimes."""

    def test_utc_anchor_with_naive_end_date(self, test_client):
        response = test_client.post(
            "/recurrence/preview",
            json={"anchor": "2025-01-13T09:00:00Z", "rule": {"unit": "day", "end_date": "2025-01-15T09:00:00"}},
        )
        assert response.status_code == 200
        occurrences = response.json()["occurrences"]
        assert len(occurrences) == 3
        assert occurrences[0].startswith("2025-01-13T09:00:00")
        assert occurrences[-1].startswith("2025-01-15T09:00:00")

    def test_naive_anchor_with_aware_date_condition(self, test_client):
        rule = {
            "unit": "day",
            "adjustment": {
                "date_conditions": [
                    {"id": "d1", "relation": "before", "reference_date": "2025-01-15T00:00:00+02:00"}
                ]
            },
        }
        response = test_client.post(
            "/recurrence/preview",
            json={"anchor": "2025-01-13T09:00:00", "rule": {**rule, "max_occurrences": 5}},
        )
        assert response.status_code == 200
        assert response.json()["occurrences"] == ["2025-01-13T09:00:00", "2025-01-14T09:00:00"]

    def test_aware_end_date_survives_storage(self, test_client, test_user_id):
        url = "/projects/p1/tasks/item-1/recurrence"
        rule = {"unit": "day", "end_date": "2025-01-15T09:00:00+02:00"}
        assert test_client.put(url, json={"rule": rule, "user_id": test_user_id}).status_code == 200
        stored = test_client.get(url).json()["rule"]
        assert stored["end_date"] == "2025-01-15T09:00:00+02:00"
