"""
tests/test_api.py

HTTP contract tests through FastAPI's TestClient.

The report store dependency is overridden with a seeded in-memory store;
the summary adapter is the mock selected by SUMMARY_PROVIDER=mock.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_report_store, get_summary_adapter
from app.main import app
from llm_synthesis.fallback import NUMERIC_SUMMARY_HEADER
from store.report_store import FirestoreReportStore, InMemoryReportStore

from factories import report_doc

START = "2025-01-01"
END = "2025-01-31"


@pytest.fixture()
def store() -> InMemoryReportStore:
    return InMemoryReportStore(
        {
            "r1": report_doc("approved", answers=[("waste_segregated", "yes")], photos=1, user="ana", trip="1"),
            "r2": report_doc("approved", user="ana", day="2025-01-11"),
            "r3": report_doc("rejected", answers=[("waste_segregated", "no")], user="raj", day="2025-01-12"),
            "r4": report_doc(
                "pending",
                feeder_id="FP-2",
                feeder_name="Lake View",
                answers=[("staff_present", "no")],
                user="li",
            ),
        }
    )


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_report_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth(client) -> dict[str, str]:
    response = client.post("/auth/login", json={"username": "admin", "password": "s3cret"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


# ---------------------------------------------------------------------------
# Health and auth
# ---------------------------------------------------------------------------


class TestAuth:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_bad_login(self, client) -> None:
        response = client.post("/auth/login", json={"username": "admin", "password": "wrong"})
        assert response.status_code == 401

    def test_missing_token(self, client) -> None:
        response = client.get("/improvement-summary", params={"start_date": START, "end_date": END})
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_logout_invalidates_token(self, client, auth) -> None:
        assert client.post("/auth/logout", headers=auth).json() == {"logged_out": True}
        assert client.get("/dashboard/stats", headers=auth).status_code == 401


# ---------------------------------------------------------------------------
# Improvement summary
# ---------------------------------------------------------------------------


class TestImprovementSummary:
    def test_ranked_insights(self, client, auth) -> None:
        body = client.get(
            "/improvement-summary", params={"start_date": START, "end_date": END}, headers=auth
        ).json()
        assert body["date_error"] is None
        assert body["aggregate"]["total_responses"] == 4
        keys = [i["key"] for i in body["insights"]]
        assert set(keys) == {"FP-1", "FP-2"}
        fp1 = next(i for i in body["insights"] if i["key"] == "FP-1")
        assert fp1["share_of_total"] == 75
        assert fp1["approved"] + fp1["rejected"] + fp1["pending"] == fp1["total_reports"]

    def test_date_error_is_not_http_error(self, client, auth) -> None:
        response = client.get(
            "/improvement-summary", params={"start_date": END, "end_date": START}, headers=auth
        )
        assert response.status_code == 200
        assert response.json()["date_error"] == "Start date must be before the end date."
        assert response.json()["insights"] == []

    def test_invalid_mode(self, client, auth) -> None:
        response = client.get("/improvement-summary", params={"mode": "best"}, headers=auth)
        assert response.status_code == 422

    def test_hide_is_session_scoped(self, client, auth) -> None:
        response = client.post("/improvement-summary/FP-2/hide", headers=auth)
        assert response.json() == {"key": "FP-2", "hidden_keys": ["FP-2"], "deleted_reports": 0}

        params = {"start_date": START, "end_date": END}
        keys = [i["key"] for i in client.get("/improvement-summary", params=params, headers=auth).json()["insights"]]
        assert keys == ["FP-1"]

        other = client.post("/auth/login", json={"username": "admin", "password": "s3cret"}).json()
        other_auth = {"Authorization": f"Bearer {other['access_token']}"}
        other_keys = [
            i["key"] for i in client.get("/improvement-summary", params=params, headers=other_auth).json()["insights"]
        ]
        assert "FP-2" in other_keys

    def test_hide_with_purge(self, client, auth, store) -> None:
        response = client.post(
            "/improvement-summary/FP-2/hide",
            json={"purge": True, "feeder_point_id": "FP-2"},
            headers=auth,
        )
        assert response.json()["deleted_reports"] == 1
        assert all(r.bucket_key != "FP-2" for r in store.list_compliance_reports())


# ---------------------------------------------------------------------------
# Review workflow
# ---------------------------------------------------------------------------


class TestReview:
    def test_flagged_queue(self, client, auth) -> None:
        body = client.get(
            "/improvement-summary/FP-1/flagged", params={"start_date": START, "end_date": END}, headers=auth
        ).json()
        assert [r["id"] for r in body["flagged"]] == ["r3"]
        assert [r["id"] for r in body["recheck"]] == ["r2"]
        assert body["flagged"][0]["answers"] == [
            {"question_id": "waste_segregated", "answer": "no", "notes": None}
        ]

    def test_repeated_question_ids_are_kept(self, client, auth, store) -> None:
        store.add_documents(
            [
                (
                    "r5",
                    report_doc(
                        "rejected",
                        answers=[("bin_condition", "no"), ("bin_condition", "yes")],
                        day="2025-01-13",
                    ),
                )
            ]
        )
        body = client.get(
            "/improvement-summary/FP-1/flagged", params={"start_date": START, "end_date": END}, headers=auth
        ).json()
        [r5] = [r for r in body["flagged"] if r["id"] == "r5"]
        assert [a["answer"] for a in r5["answers"]] == ["no", "yes"]

    def test_flagged_queue_bad_window(self, client, auth) -> None:
        response = client.get("/improvement-summary/FP-1/flagged", headers=auth)
        assert response.status_code == 400

    def test_status_update(self, client, auth, store) -> None:
        response = client.post("/reports/r4/status", json={"status": "approved"}, headers=auth)
        assert response.json() == {"report_id": "r4", "status": "approved"}
        [r4] = [r for r in store.list_compliance_reports() if r.id == "r4"]
        assert r4.status == "approved"

    def test_status_update_missing_report(self, client, auth) -> None:
        response = client.post("/reports/nope/status", json={"status": "rejected"}, headers=auth)
        assert response.status_code == 404

    def test_status_update_rejects_other_statuses(self, client, auth) -> None:
        response = client.post("/reports/r4/status", json={"status": "pending"}, headers=auth)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Summaries and export
# ---------------------------------------------------------------------------


class TestSummaries:
    def test_feeder_summary_uses_mock_adapter(self, client, auth) -> None:
        body = client.post(
            "/feeder-summary", json={"key": "FP-1", "start_date": START, "end_date": END}, headers=auth
        ).json()
        assert body["simulated"] is False
        assert body["summary"].startswith("Mock summary")
        assert body["question_stats"] == [{"name": "waste segregated", "yes": 1, "no": 1}]

    def test_feeder_summary_without_reports_falls_back(self, client, auth) -> None:
        body = client.post(
            "/feeder-summary", json={"key": "FP-9", "start_date": START, "end_date": END}, headers=auth
        ).json()
        assert body["simulated"] is True
        assert NUMERIC_SUMMARY_HEADER in body["summary"]

    def test_report_analysis_uses_mock_adapter(self, client, auth) -> None:
        body = client.post("/reports/r3/analysis", headers=auth).json()
        assert body["report_id"] == "r3"
        assert body["simulated"] is False
        assert body["analysis"].startswith("Mock summary")

    def test_report_analysis_without_adapter_falls_back(self, client, auth) -> None:
        app.dependency_overrides[get_summary_adapter] = lambda: None
        body = client.post(
            "/reports/r3/analysis", json={"feeder_point_name": "Market Road"}, headers=auth
        ).json()
        assert body["simulated"] is True
        assert body["analysis"].startswith("Simulated review for Market Road")
        assert "Items requiring attention:" in body["analysis"]

    def test_report_analysis_unknown_report(self, client, auth) -> None:
        response = client.post("/reports/nope/analysis", headers=auth)
        assert response.status_code == 404

    def test_daily_summary_with_ministry_report(self, client, auth) -> None:
        body = client.post(
            "/daily-summary", json={"date": "2025-01-10", "include_ministry_report": True}, headers=auth
        ).json()
        assert body["date"] == "2025-01-10"
        assert "REPORT ID: TCR-2025-01-10" in body["ministry_report"]

    def test_daily_summary_bad_date(self, client, auth) -> None:
        response = client.post("/daily-summary", json={"date": "tomorrow"}, headers=auth)
        assert response.status_code == 400


class TestExport:
    def test_text_download(self, client, auth) -> None:
        response = client.get(
            "/export/feeder-summary",
            params={"key": "FP-1", "start_date": START, "end_date": END},
            headers=auth,
        )
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["content-disposition"] == 'attachment; filename="Feeder_Summary_Market_Road.txt"'
        assert "Feeder Point: Market Road" in response.text

    def test_csv_download_with_trip(self, client, auth) -> None:
        response = client.get(
            "/export/feeder-summary",
            params={"key": "FP-1", "start_date": START, "end_date": END, "format": "csv", "trip": "1"},
            headers=auth,
        )
        assert response.headers["content-type"].startswith("text/csv")
        assert "feeder,Trip Filter,,,Trip 1" in response.text

    def test_unknown_format(self, client, auth) -> None:
        response = client.get(
            "/export/feeder-summary",
            params={"key": "FP-1", "start_date": START, "end_date": END, "format": "pdf"},
            headers=auth,
        )
        assert response.status_code == 400

    def test_unknown_feeder(self, client, auth) -> None:
        response = client.get(
            "/export/feeder-summary",
            params={"key": "nope", "start_date": START, "end_date": END},
            headers=auth,
        )
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


class TestDashboard:
    def test_store_without_client_degrades(self, client, auth, unconfigured_firestore) -> None:
        app.dependency_overrides[get_report_store] = lambda: FirestoreReportStore()
        stats = client.get("/dashboard/stats", headers=auth)
        assert stats.status_code == 200
        assert stats.json()["total_feeder_points"] == 0

        update = client.post("/reports/r1/status", json={"status": "approved"}, headers=auth)
        assert update.status_code == 502

    def test_stats(self, client, auth) -> None:
        body = client.get("/dashboard/stats", headers=auth).json()
        assert body["total_feeder_points"] == 2
        assert body["total_users"] == 0

    def test_performance(self, client, auth) -> None:
        body = client.get(
            "/dashboard/performance", params={"start_date": START, "end_date": END}, headers=auth
        ).json()
        assert body["feeder_ranking"]["best_name"] == "Market Road"
        assert body["feeder_ranking"]["worst_name"] == "Lake View"
        assert body["top_performers"][0]["user_key"] == "ana"

    def test_performance_single_day(self, client, auth) -> None:
        body = client.get(
            "/dashboard/performance",
            params={"start_date": START, "end_date": END, "single_day": "2025-01-12"},
            headers=auth,
        ).json()
        assert body["feeder_ranking"]["only_one"] is True
        assert body["feeder_ranking"]["best_approval_rate"] == 0.0
