from datetime import timedelta

import pytest

from models import db
from models.savings_goal_model import SavingsGoal
from timeutils import isoformat, utcnow


def _in_days(days):
    return isoformat(utcnow() + timedelta(days=days))


def _create(client, headers, **fields):
    body = {"title": "Trip", "targetAmount": 1200, "deadline": _in_days(90)}
    body.update(fields)
    return client.post("/api/savings-goals", json=body, headers=headers)


def test_create_goal_computes_monthly_target(client, auth_headers):
    resp = _create(client, auth_headers)
    goal = resp.get_json()["data"]["savingsGoal"]

    assert resp.status_code == 201
    assert goal["monthsRemaining"] == 3
    assert goal["monthlyTarget"] == pytest.approx(400)
    assert goal["currentAmount"] == 0
    assert goal["status"] == "active"
    assert goal["category"] == "other"
    assert goal["progressPercentage"] == 0
    assert goal["daysRemaining"] == 90


def test_add_savings_completes_goal(client, auth_headers):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]
    url = f"/api/savings-goals/{goal_id}/add-savings"

    first = client.post(url, json={"amount": 500}, headers=auth_headers).get_json()["data"]["savingsGoal"]
    assert first["currentAmount"] == 500
    assert first["status"] == "active"
    assert first["progressPercentage"] == pytest.approx(500 / 1200 * 100)

    second = client.post(url, json={"amount": 700}, headers=auth_headers).get_json()["data"]["savingsGoal"]
    assert second["currentAmount"] == 1200
    assert second["status"] == "completed"
    assert second["progressPercentage"] == 100


def test_add_savings_requires_positive_amount(client, auth_headers):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]
    url = f"/api/savings-goals/{goal_id}/add-savings"

    for amount in (0, -10, None):
        resp = client.post(url, json={"amount": amount}, headers=auth_headers)
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Amount must be greater than 0"


@pytest.mark.parametrize("amount", ["abc", "12abc", "NaN"])
def test_add_savings_rejects_non_numeric_amount(client, auth_headers, amount):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]

    resp = client.post(f"/api/savings-goals/{goal_id}/add-savings", json={"amount": amount}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.get_json()["message"].startswith("amount:")

    goal = client.get(f"/api/savings-goals/{goal_id}", headers=auth_headers).get_json()["data"]["savingsGoal"]
    assert goal["currentAmount"] == 0


@pytest.mark.parametrize(
    "fields, message",
    [
        ({"title": ""}, "Title, target amount, and deadline are required"),
        ({"deadline": None}, "Title, target amount, and deadline are required"),
        ({"targetAmount": 0}, "Target amount must be greater than 0"),
        ({"targetAmount": -50}, "Target amount must be greater than 0"),
        ({"deadline": "2000-01-01"}, "Deadline must be in the future"),
    ],
)
def test_create_validation(client, auth_headers, fields, message):
    resp = _create(client, auth_headers, **fields)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == message


def test_create_rejects_unknown_category(client, auth_headers):
    assert _create(client, auth_headers, category="yacht").status_code == 400


def test_update_recomputes_monthly_target(client, auth_headers):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]

    resp = client.put(
        f"/api/savings-goals/{goal_id}",
        json={"targetAmount": 600, "deadline": _in_days(180)},
        headers=auth_headers,
    )
    goal = resp.get_json()["data"]["savingsGoal"]

    assert resp.status_code == 200
    assert goal["monthsRemaining"] == 6
    assert goal["monthlyTarget"] == pytest.approx(100)


def test_update_without_target_inputs_keeps_monthly_target(client, auth_headers):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]

    resp = client.put(
        f"/api/savings-goals/{goal_id}",
        json={"title": "Japan", "status": "paused", "category": "vacation"},
        headers=auth_headers,
    )
    goal = resp.get_json()["data"]["savingsGoal"]

    assert goal["title"] == "Japan"
    assert goal["status"] == "paused"
    assert goal["category"] == "vacation"
    assert goal["monthlyTarget"] == pytest.approx(400)


@pytest.mark.parametrize(
    "fields",
    [{"targetAmount": 0}, {"deadline": "2001-05-05"}, {"status": "done"}, {"currentAmount": -1}],
)
def test_update_validates_present_fields(client, auth_headers, fields):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]
    resp = client.put(f"/api/savings-goals/{goal_id}", json=fields, headers=auth_headers)
    assert resp.status_code == 400


def test_goals_are_scoped_to_owner(client, auth_headers, other_headers):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]

    assert client.get(f"/api/savings-goals/{goal_id}", headers=other_headers).status_code == 404
    assert client.put(f"/api/savings-goals/{goal_id}", json={"title": "x"}, headers=other_headers).status_code == 404
    assert client.post(
        f"/api/savings-goals/{goal_id}/add-savings", json={"amount": 1}, headers=other_headers
    ).status_code == 404
    assert client.delete(f"/api/savings-goals/{goal_id}", headers=other_headers).status_code == 404
    assert client.get("/api/savings-goals", headers=other_headers).get_json()["data"]["count"] == 0


def test_list_newest_first(client, auth_headers):
    first = _create(client, auth_headers, title="First").get_json()["data"]["savingsGoal"]["id"]
    second = _create(client, auth_headers, title="Second").get_json()["data"]["savingsGoal"]["id"]

    data = client.get("/api/savings-goals", headers=auth_headers).get_json()["data"]

    assert data["count"] == 2
    assert [g["id"] for g in data["savingsGoals"]] == [second, first]


def test_soft_delete_hides_goal_but_keeps_record(app, client, auth_headers):
    goal_id = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]

    resp = client.delete(f"/api/savings-goals/{goal_id}", headers=auth_headers)

    assert resp.status_code == 200
    assert client.get(f"/api/savings-goals/{goal_id}", headers=auth_headers).status_code == 404
    assert client.get("/api/savings-goals", headers=auth_headers).get_json()["data"]["count"] == 0
    stats = client.get("/api/savings-goals/stats/summary", headers=auth_headers).get_json()["data"]["stats"]
    assert stats["totalGoals"] == 0

    with app.app_context():
        record = db.session.get(SavingsGoal, int(goal_id))
        assert record is not None
        assert record.is_active is False


def test_stats_summary(client, auth_headers):
    trip = _create(client, auth_headers).get_json()["data"]["savingsGoal"]["id"]
    _create(client, auth_headers, title="Car", targetAmount=600, deadline=_in_days(180))
    client.post(f"/api/savings-goals/{trip}/add-savings", json={"amount": 1200}, headers=auth_headers)

    stats = client.get("/api/savings-goals/stats/summary", headers=auth_headers).get_json()["data"]["stats"]

    assert stats["totalGoals"] == 2
    assert stats["activeGoals"] == 1
    assert stats["completedGoals"] == 1
    assert stats["totalTargetAmount"] == 1800
    assert stats["totalCurrentAmount"] == 1200
    # only the still-active Car goal counts towards the monthly total
    assert stats["totalMonthlyTarget"] == pytest.approx(100)
    assert stats["averageProgress"] == pytest.approx(50)


def test_stats_summary_without_goals(client, auth_headers):
    stats = client.get("/api/savings-goals/stats/summary", headers=auth_headers).get_json()["data"]["stats"]
    assert stats["totalGoals"] == 0
    assert stats["averageProgress"] == 0
