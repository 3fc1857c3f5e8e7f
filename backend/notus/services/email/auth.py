import time
from typing import Optional

import httpx


class GraphTokenProvider:
    """Graph API token via the client_credentials flow. Cached until expiry."""

    def __init__(
        self,
        tenant_id: str,
        client_id: str,
        client_secret: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.tenant_id = tenant_id
        self.client_id = client_id
        self.client_secret = client_secret
        self.transport = transport
        self._access_token: Optional[str] = None
        self._expires_at: float = 0

    @property
    def configured(self) -> bool:
        return all([self.tenant_id, self.client_id, self.client_secret])

    async def get_access_token(self) -> str:
        if self._access_token and time.time() < self._expires_at - 300:
            return self._access_token

        if not self.configured:
            raise ValueError("Email Graph API credentials not configured")

        async with httpx.AsyncClient(transport=self.transport) as client:
            resp = await client.post(
                f"https://login.microsoftonline.com/{self.tenant_id}/oauth2/v2.0/token",
                data={
                    "client_id": self.client_id,
                    "scope": "https://graph.microsoft.com/.default",
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
            resp.raise_for_status()
            data = resp.json()

        self._access_token = data["access_token"]
        self._expires_at = time.time() + data["expires_in"]
        return self._access_token
