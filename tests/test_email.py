"""Unit tests for the SendGrid email transport."""

from __future__ import annotations

import json
import types

import pytest

from minicrm.infrastructure import email as email_module
from minicrm.infrastructure.email import (
    TRANSPORT_NOT_CONFIGURED,
    OutboundEmail,
    SendGridTransport,
    build_sendgrid_message,
)

MESSAGE = OutboundEmail(
    from_name="Mia Manager",
    reply_to="mia@example.com",
    to_name="Carl Client",
    to_email="carl@example.com",
    subject="Subject",
    html="<p>Body</p>",
    text="Body",
)


class DummySettings:
    sendgrid_api_key = "SG.fake"
    sendgrid_sender = "sender@example.com"


class RecordingClient:
    """Stand-in for ``SendGridAPIClient`` returning a configurable response."""

    sent: list = []
    status_code = 202

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        type(self).sent.append(message)
        return types.SimpleNamespace(status_code=self.status_code, body=None)


@pytest.fixture
def configured(monkeypatch: pytest.MonkeyPatch):
    RecordingClient.sent = []
    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingClient)


def test_send_email_without_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    """When SendGrid settings are missing the attempt fails without a request."""

    class EmptySettings:
        sendgrid_api_key = None
        sendgrid_sender = None

    monkeypatch.setattr(email_module, "get_settings", lambda: EmptySettings())

    result = email_module.send_email(MESSAGE)

    assert result.success is False
    assert result.error == TRANSPORT_NOT_CONFIGURED


def test_send_email_success(configured) -> None:
    result = email_module.send_email(MESSAGE)

    assert result.success is True
    assert result.status_code == 202
    assert len(RecordingClient.sent) == 1


def test_sendgrid_message_uses_sender_and_reply_to() -> None:
    payload = build_sendgrid_message(MESSAGE, "sender@example.com").get()

    assert payload["from"] == {"email": "sender@example.com", "name": "Mia Manager"}
    assert payload["reply_to"] == {"email": "mia@example.com", "name": "Mia Manager"}
    assert payload["personalizations"][0]["to"] == [
        {"email": "carl@example.com", "name": "Carl Client"}
    ]
    assert {content["type"] for content in payload["content"]} == {"text/plain", "text/html"}


def test_send_email_reports_unsuccessful_status(configured, monkeypatch) -> None:
    monkeypatch.setattr(RecordingClient, "status_code", 500)

    result = email_module.send_email(MESSAGE)

    assert result.success is False
    assert result.status_code == 500
    assert "status 500" in result.error


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog):
    """Forbidden responses from SendGrid should surface meaningful details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/for-developers/sending-email/api-getting-started/",
                    }
                ]
            }
        ).encode()

    class FailingClient(RecordingClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "get_settings", lambda: DummySettings())
    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)

    with caplog.at_level("ERROR"):
        result = email_module.send_email(MESSAGE)

    assert result.success is False
    assert result.status_code == 403
    assert "authorization grant is invalid" in result.error
    assert "status 403" in caplog.text


@pytest.mark.anyio
async def test_transport_runs_the_send_in_a_worker_thread(configured) -> None:
    result = await SendGridTransport()(MESSAGE)

    assert result.success is True
    assert len(RecordingClient.sent) == 1
