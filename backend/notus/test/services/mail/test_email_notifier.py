import asyncio
import json

import httpx

from notus.services.email.auth import GraphTokenProvider
from notus.services.email.graph_mail_client import (
    GraphMailClient,
    render_deletion_email,
    render_deletion_subject,
)
from notus.services.email.notifier import EmailNotifier


def make_transport(requests):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.host == "login.microsoftonline.com":
            return httpx.Response(
                200, json={"access_token": "token-123", "expires_in": 3600}
            )
        return httpx.Response(202)

    return httpx.MockTransport(handler)


class TestTemplates:
    """Tests for the localized account emails."""

    def test_deletion_email_mentions_retention(self):
        body = render_deletion_email("Alice", retention_days=30)

        assert "Alice" in body
        assert "30 days" in body

    def test_french_subject(self):
        assert "supprimé" in render_deletion_subject(locale="fr")

    def test_unknown_locale_falls_back_to_english(self):
        assert render_deletion_subject(locale="xx") == render_deletion_subject()

    def test_display_name_is_escaped(self):
        assert "<script>" not in render_deletion_email("<script>alert(1)</script>")


class TestEmailNotifier:
    """Tests for delivery through the Graph mail client."""

    def test_deletion_confirmation_is_sent(self):
        requests = []
        transport = make_transport(requests)
        provider = GraphTokenProvider("tenant", "client", "secret", transport=transport)
        client = GraphMailClient(provider, "noreply@notus.app", transport=transport)
        notifier = EmailNotifier(client, locale="en", retention_days=30)

        asyncio.run(notifier.send_deletion_confirmation("alice@example.com", "Alice"))

        token_request, mail_request = requests
        assert token_request.url.path == "/tenant/oauth2/v2.0/token"
        assert mail_request.url.path == "/v1.0/users/noreply@notus.app/sendMail"
        assert mail_request.headers["Authorization"] == "Bearer token-123"
        payload = json.loads(mail_request.content)
        recipient = payload["message"]["toRecipients"][0]["emailAddress"]["address"]
        assert recipient == "alice@example.com"

    def test_token_is_cached(self):
        requests = []
        transport = make_transport(requests)
        provider = GraphTokenProvider("tenant", "client", "secret", transport=transport)

        async def fetch_twice():
            await provider.get_access_token()
            await provider.get_access_token()

        asyncio.run(fetch_twice())

        assert len(requests) == 1
