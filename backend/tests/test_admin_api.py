"""
Endpoint tests for the admin dashboard, analytics and exports.
"""
import csv
import io
import json

import pytest

from tests.conftest import bearer, issue_payload


async def seed_issues(client, token):
    created = []
    for issue_type in ("pothole", "pothole", "garbage", "water_leak"):
        response = await client.post(
            "/api/v1/issues/", json=issue_payload(issue_type=issue_type), headers=bearer(token)
        )
        created.append(response.json())
    return created


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/api/v1/admin/dashboard",
        "/api/v1/admin/analytics",
        "/api/v1/admin/analytics/report.csv",
        "/api/v1/admin/export",
        "/api/v1/admin/issues/00000000-0000-0000-0000-000000000001",
    ],
)
async def test_admin_routes_deny_anonymous(api_client, citizen, path):
    await seed_issues(api_client, citizen["access_token"])

    response = await api_client.get(path)

    assert response.status_code == 401
    body = response.json()
    assert body["error"] == "access_denied"
    assert body["home"] == "/"
    assert "issues" not in body
    assert "stats" not in body


@pytest.mark.asyncio
async def test_admin_routes_deny_citizen(api_client, citizen):
    response = await api_client.get(
        "/api/v1/admin/dashboard", headers=bearer(citizen["access_token"])
    )

    assert response.status_code == 403
    assert response.json()["error"] == "access_denied"


@pytest.mark.asyncio
async def test_admin_dashboard(api_client, citizen, admin):
    await seed_issues(api_client, citizen["access_token"])

    response = await api_client.get(
        "/api/v1/admin/dashboard",
        params={"issue_type": "pothole"},
        headers=bearer(admin["access_token"]),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["total"] == 4
    assert body["stats"]["pending"] == 4
    assert body["issues"]["showing"] == 2
    assert body["issues"]["total"] == 4


@pytest.mark.asyncio
async def test_admin_analytics(api_client, citizen, admin):
    issues = await seed_issues(api_client, citizen["access_token"])
    headers = bearer(admin["access_token"])
    await api_client.put(
        f"/api/v1/issues/{issues[0]['id']}/status", json={"status": "resolved"}, headers=headers
    )

    response = await api_client.get(
        "/api/v1/admin/analytics", params={"period": "30"}, headers=headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["period"] == "30"
    stats = body["stats"]
    assert stats["total"] == 4
    assert stats["resolved"] == 1
    assert stats["resolution_rate"] == 25
    assert stats["by_type"] == {"pothole": 2, "garbage": 1, "water_leak": 1}
    assert stats["by_priority"] == {"medium": 4}
    assert stats["avg_resolution_time"] >= 0
    departments = {row["name"]: row for row in body["departments"]}
    assert departments["Road Maintenance"]["issues_assigned"] == 2
    assert departments["Utilities"]["cost"] == 200
    assert len(body["monthly"]) == 1
    assert body["monthly"][0]["total_cost"] == 675
    assert len(body["geographic"]) == 4


@pytest.mark.asyncio
async def test_admin_analytics_rejects_unknown_period(api_client, admin):
    response = await api_client.get(
        "/api/v1/admin/analytics", params={"period": "14"}, headers=bearer(admin["access_token"])
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_analytics_csv_download(api_client, citizen, admin):
    await seed_issues(api_client, citizen["access_token"])

    response = await api_client.get(
        "/api/v1/admin/analytics/report.csv", headers=bearer(admin["access_token"])
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "analytics-report-" in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0][0] == "Month"
    assert rows[1][1:] == ["4", "0", "0.00", "675"]


@pytest.mark.asyncio
async def test_export_json_and_csv(api_client, citizen, admin):
    issues = await seed_issues(api_client, citizen["access_token"])
    headers = bearer(admin["access_token"])

    as_json = await api_client.get("/api/v1/admin/export", headers=headers)
    assert as_json.status_code == 200
    assert as_json.headers["content-disposition"].startswith('attachment; filename="issues-export-')
    exported = json.loads(as_json.text)
    assert {row["id"] for row in exported} == {issue["id"] for issue in issues}

    as_csv = await api_client.get("/api/v1/admin/export", params={"format": "csv"}, headers=headers)
    assert as_csv.status_code == 200
    rows = list(csv.DictReader(io.StringIO(as_csv.text)))
    assert len(rows) == 4
    assert rows[0]["status"] == "pending"
    assert rows[0]["admin_notes"] == ""


@pytest.mark.asyncio
async def test_export_denied_to_citizen(api_client, citizen):
    response = await api_client.get(
        "/api/v1/admin/export", headers=bearer(citizen["access_token"])
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_analytics_csv_denied_to_citizen(api_client, citizen):
    response = await api_client.get(
        "/api/v1/admin/analytics/report.csv", headers=bearer(citizen["access_token"])
    )
    assert response.status_code == 403
    assert response.json()["error"] == "access_denied"


@pytest.mark.asyncio
async def test_admin_issue_detail_includes_reporter(api_client, citizen, admin):
    issues = await seed_issues(api_client, citizen["access_token"])

    response = await api_client.get(
        f"/api/v1/admin/issues/{issues[2]['id']}", headers=bearer(admin["access_token"])
    )

    assert response.status_code == 200
    body = response.json()
    assert body["issue"]["id"] == issues[2]["id"]
    assert body["issue"]["issue_type"] == "garbage"
    assert body["reporter"] == {
        "id": citizen["user"]["id"],
        "email": citizen["user"]["email"],
        "full_name": citizen["user"]["full_name"],
    }


@pytest.mark.asyncio
async def test_admin_issue_detail_denied_to_citizen(api_client, citizen):
    (issue, *_) = await seed_issues(api_client, citizen["access_token"])

    response = await api_client.get(
        f"/api/v1/admin/issues/{issue['id']}", headers=bearer(citizen["access_token"])
    )

    assert response.status_code == 403
    assert "issue" not in response.json()


@pytest.mark.asyncio
@pytest.mark.parametrize("issue_id", ["00000000-0000-0000-0000-000000000001", "not-a-uuid"])
async def test_admin_issue_detail_unknown_id(api_client, admin, issue_id):
    response = await api_client.get(
        f"/api/v1/admin/issues/{issue_id}", headers=bearer(admin["access_token"])
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Issue not found"
