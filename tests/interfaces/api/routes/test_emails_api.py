"""Tests for the scheduled email endpoints."""

from __future__ import annotations

from datetime import timedelta

from minicrm.domain.entities import EMAIL_STATUS_FAILED, EMAIL_STATUS_SENT
from minicrm.utils import now_in_app_timezone

PAYLOAD = {
    "from_name": "Mia Manager",
    "to_name": "Carl Client",
    "to_email": "carl@example.com",
    "subject": "Welcome",
    "message": "Thanks for joining.",
    "template": "business",
}


def test_manager_schedules_and_reads_an_email(client, manager, login):
    headers = login(manager)
    scheduled_for = (now_in_app_timezone() + timedelta(days=1)).isoformat()

    response = client.post(
        "/emails/",
        json={**PAYLOAD, "send_now": False, "scheduled_for": scheduled_for},
        headers=headers,
    )

    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "pending"
    assert created["from_email"] == manager.email
    assert created["company_id"] == manager.company_id

    detail = client.get(f"/emails/{created['id']}", headers=headers)
    assert detail.status_code == 200
    assert detail.json()["template"] == "business"


def test_schedule_in_the_past_is_rejected(client, manager, login):
    scheduled_for = (now_in_app_timezone() - timedelta(hours=1)).isoformat()

    response = client.post(
        "/emails/",
        json={**PAYLOAD, "send_now": False, "scheduled_for": scheduled_for},
        headers=login(manager),
    )

    assert response.status_code == 400


def test_employees_cannot_use_email_routes(client, make_user, login):
    employee = make_user("employee")
    headers = login(employee)

    assert client.post("/emails/", json=PAYLOAD, headers=headers).status_code == 403
    assert client.get("/emails/", headers=headers).status_code == 403


def test_list_returns_scope_and_pagination(client, manager, make_user, make_email, login):
    outsider = make_user("manager", company_id=42)
    for index in range(3):
        make_email(manager, to_email=f"c{index}@example.com")
    make_email(outsider)

    response = client.get("/emails/", params={"page": 1, "limit": 2}, headers=login(manager))

    assert response.status_code == 200
    body = response.json()
    assert len(body["emails"]) == 2
    assert body["pagination"] == {
        "current_page": 1,
        "total_pages": 2,
        "total_items": 3,
        "has_next_page": True,
        "has_prev_page": False,
    }


def test_list_filters_by_status(client, super_admin, manager, make_email, login):
    make_email(manager)
    make_email(manager, status=EMAIL_STATUS_FAILED)

    response = client.get("/emails/", params={"status": "failed"}, headers=login(super_admin))

    assert response.status_code == 200
    assert [email["status"] for email in response.json()["emails"]] == ["failed"]
    assert client.get(
        "/emails/", params={"status": "queued"}, headers=login(super_admin)
    ).status_code == 400


def test_templates_endpoint(client, manager, login):
    response = client.get("/emails/templates", headers=login(manager))

    assert response.status_code == 200
    assert [template["id"] for template in response.json()] == ["default", "business"]


def test_cancel_then_cancel_again_conflicts(client, manager, make_email, login):
    email = make_email(manager)
    headers = login(manager)

    first = client.put(f"/emails/{email.id}/cancel", headers=headers)
    second = client.put(f"/emails/{email.id}/cancel", headers=headers)

    assert first.status_code == 200
    assert first.json()["status"] == "cancelled"
    assert second.status_code == 409
    assert "cancelled" in second.json()["detail"]


def test_retry_only_for_failed_emails(client, manager, make_email, login):
    failed = make_email(manager, status=EMAIL_STATUS_FAILED)
    sent = make_email(manager, status=EMAIL_STATUS_SENT)
    headers = login(manager)

    retried = client.put(f"/emails/{failed.id}/retry", headers=headers)
    rejected = client.put(f"/emails/{sent.id}/retry", headers=headers)

    assert retried.status_code == 200
    assert retried.json()["status"] == "pending"
    assert retried.json()["send_now"] is True
    assert rejected.status_code == 409


def test_company_manager_can_view_but_not_cancel(client, manager, make_user, make_email, login):
    colleague = make_user("manager", company_id=manager.company_id)
    email = make_email(colleague)
    headers = login(manager)

    assert client.get(f"/emails/{email.id}", headers=headers).status_code == 200
    assert client.put(f"/emails/{email.id}/cancel", headers=headers).status_code == 403


def test_foreign_email_is_forbidden_and_missing_email_is_404(
    client, manager, make_user, make_email, login
):
    email = make_email(make_user("manager", company_id=77))
    headers = login(manager)

    assert client.get(f"/emails/{email.id}", headers=headers).status_code == 403
    assert client.get("/emails/9999", headers=headers).status_code == 404
    assert client.put("/emails/9999/retry", headers=headers).status_code == 404


def test_scheduler_is_attached_but_not_started(app, client):
    scheduler = app.state.email_scheduler

    assert scheduler is not None
    assert scheduler.is_running is False
