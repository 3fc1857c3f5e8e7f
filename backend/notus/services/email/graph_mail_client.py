import html
from typing import Optional

import httpx

from notus.services.email.auth import GraphTokenProvider

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"

APP_NAME = "Notus"

_STRINGS = {
    "en": {
        "deletion_subject": f"Your {APP_NAME} account has been deleted",
        "deletion_heading": "Account deleted",
        "deletion_body": (
            "Hello {display_name}, your account and your notes have been deleted. "
            "You can still reactivate them within {retention_days} days by signing "
            "in with the same email address."
        ),
        "deletion_footer": (
            "After that period your data is removed permanently. "
            "If you did not request this, sign in now to restore your account."
        ),
        "reactivation_subject": f"Your {APP_NAME} account has been reactivated",
        "reactivation_heading": "Welcome back",
        "reactivation_body": (
            "Hello {display_name}, your account has been reactivated and your notes "
            "have been restored."
        ),
        "reactivation_footer": "If you did not do this, reset your password right away.",
    },
    "fr": {
        "deletion_subject": f"Votre compte {APP_NAME} a été supprimé",
        "deletion_heading": "Compte supprimé",
        "deletion_body": (
            "Bonjour {display_name}, votre compte et vos notes ont été supprimés. "
            "Vous pouvez encore les réactiver pendant {retention_days} jours en vous "
            "connectant avec la même adresse e-mail."
        ),
        "deletion_footer": (
            "Passé ce délai, vos données seront définitivement effacées. "
            "Si vous n'êtes pas à l'origine de cette demande, connectez-vous pour restaurer votre compte."
        ),
        "reactivation_subject": f"Votre compte {APP_NAME} a été réactivé",
        "reactivation_heading": "Bon retour parmi nous",
        "reactivation_body": (
            "Bonjour {display_name}, votre compte a été réactivé et vos notes ont été restaurées."
        ),
        "reactivation_footer": (
            "Si vous n'êtes pas à l'origine de cette action, réinitialisez votre mot de passe immédiatement."
        ),
    },
}


def _get_strings(locale: str) -> dict:
    lang = locale.split("-")[0].lower() if locale else "en"
    return _STRINGS.get(lang, _STRINGS["en"])


def _render(heading: str, body: str, footer: str) -> str:
    return f"""\
<!DOCTYPE html>
<html>
<head>
<meta name="format-detection" content="telephone=no, date=no, address=no, email=no, url=no">
</head>
<body id="body">
<div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
            max-width: 560px; margin: 0 auto; padding: 40px 20px;">
    <h2 style="color: #1a1a1a; margin-bottom: 8px;">
        {heading}
    </h2>
    <p style="color: #4a4a4a; font-size: 16px; line-height: 1.5;">
        {body}
    </p>
    <p style="color: #9a9a9a; font-size: 13px; margin-top: 32px;">
        {footer}
    </p>
</div>
</body>
</html>"""


def render_deletion_subject(locale: str = "en") -> str:
    return _get_strings(locale)["deletion_subject"]


def render_deletion_email(
    display_name: str, locale: str = "en", retention_days: int = 30
) -> str:
    strings = _get_strings(locale)
    return _render(
        strings["deletion_heading"],
        strings["deletion_body"].format(
            display_name=html.escape(display_name), retention_days=retention_days
        ),
        strings["deletion_footer"],
    )


def render_reactivation_subject(locale: str = "en") -> str:
    return _get_strings(locale)["reactivation_subject"]


def render_reactivation_email(display_name: str, locale: str = "en") -> str:
    strings = _get_strings(locale)
    return _render(
        strings["reactivation_heading"],
        strings["reactivation_body"].format(display_name=html.escape(display_name)),
        strings["reactivation_footer"],
    )


class GraphMailClient:
    def __init__(
        self,
        token_provider: GraphTokenProvider,
        from_address: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_provider = token_provider
        self.from_address = from_address
        self.timeout = timeout
        self.transport = transport

    async def send_mail(self, to_address: str, subject: str, html_body: str) -> bool:
        """Send email via Microsoft Graph API. Returns True on success."""
        token = await self.token_provider.get_access_token()

        payload = {
            "message": {
                "subject": subject,
                "body": {"contentType": "HTML", "content": html_body},
                "toRecipients": [{"emailAddress": {"address": to_address}}],
            },
            "saveToSentItems": False,
        }

        async with httpx.AsyncClient(
            timeout=self.timeout, transport=self.transport
        ) as client:
            resp = await client.post(
                f"{GRAPH_BASE_URL}/users/{self.from_address}/sendMail",
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )

            if resp.status_code == 429:
                retry_after = int(resp.headers.get("Retry-After", 60))
                raise Exception(f"Rate limited. Retry after {retry_after}s")

            resp.raise_for_status()
            return True
