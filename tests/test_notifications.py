"""Tests for the email transport and notification templates."""
from types import SimpleNamespace

import httpx
import pytest

from voter_onboarding.config import get_settings
from voter_onboarding.exceptions import NotificationFailure
from voter_onboarding.services import notifications


@pytest.fixture
def mailgun(monkeypatch):
    """Configure Mailgun and route its HTTP calls to a mock transport."""
    settings = get_settings()
    monkeypatch.setattr(settings, "mailgun_api_key", "key-test")
    monkeypatch.setattr(settings, "mailgun_domain", "mg.voting.demo")
    monkeypatch.setattr(settings, "mailgun_from_email", "noreply@voting.demo")
    requests = []
    responses = []
    real_client = httpx.Client

    def handler(request):
        requests.append(request)
        return responses.pop(0) if responses else httpx.Response(200, json={"id": "<msg@mg>"})

    monkeypatch.setattr(
        notifications.httpx,
        "Client",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    return SimpleNamespace(requests=requests, responses=responses)


def test_mailgun_success(mailgun):
    assert notifications.send_email("a@x.com", "Hi", "<p>hi</p>") is True
    request = mailgun.requests[0]
    assert request.url.path == "/v3/mg.voting.demo/messages"
    body = request.content.decode()
    assert "a%40x.com" in body
    # From address is forced onto the sending domain
    assert "noreply%40mg.voting.demo" in body


def test_mailgun_retries_eu_on_401(mailgun):
    mailgun.responses.extend([httpx.Response(401), httpx.Response(200, json={})])
    assert notifications.send_email("a@x.com", "Hi", "<p>hi</p>") is True
    assert [r.url.host for r in mailgun.requests] == ["api.mailgun.net", "api.eu.mailgun.net"]


def test_mailgun_failure(mailgun):
    mailgun.responses.append(httpx.Response(500, text="boom"))
    assert notifications.send_email("a@x.com", "Hi", "<p>hi</p>") is False


def test_unconfigured_returns_false(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "mailgun_api_key", "")
    monkeypatch.setattr(settings, "sendgrid_api_key", "")
    assert notifications.send_email("a@x.com", "Hi", "<p>hi</p>") is False


def test_notification_failure_raised(failing_email):
    recipient = SimpleNamespace(name="Alice", email="a@x.com")
    with pytest.raises(NotificationFailure):
        notifications.send_approval_email(recipient, "VTR123")


def test_templates(outbox):
    recipient = SimpleNamespace(name="Alice", email="a@x.com")
    notifications.send_approval_email(recipient, "VTR123")
    notifications.send_rejection_email(recipient, "Blurry ID")
    notifications.send_profile_update_email(recipient, old_name="Al")
    notifications.send_profile_update_email(recipient)

    assert outbox.subjects() == [
        "Account Approval Notification",
        "Account Rejection Notification",
        "Profile Update Notification",
        "Profile Update Notification",
    ]
    assert "<b>VTR123</b>" in outbox[0]["html"]
    assert "Reason: Blurry ID" in outbox[1]["html"]
    assert "changed from Al to Alice" in outbox[2]["html"]
    assert "Your profile has been updated" in outbox[3]["html"]


def test_user_supplied_text_is_escaped(outbox):
    recipient = SimpleNamespace(name="<script>x</script>", email="a@x.com")
    notifications.send_rejection_email(recipient, 'ID <img src="y">')
    notifications.send_profile_update_email(recipient, old_name="<b>Old</b>")

    rejection, update = outbox[0]["html"], outbox[1]["html"]
    assert "<script>" not in rejection
    assert "&lt;script&gt;x&lt;/script&gt;" in rejection
    assert "Reason: ID &lt;img src=&quot;y&quot;&gt;" in rejection
    assert "from &lt;b&gt;Old&lt;/b&gt; to &lt;script&gt;" in update
