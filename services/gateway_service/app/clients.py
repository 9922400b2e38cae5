"""HTTP clients for gateway to call microservices."""

from typing import Optional

import httpx
from libs.common.config import get_settings

settings = get_settings()


class ServiceClient:
    """Thin wrapper that forwards a request to one downstream service.

    Responses are returned as-is (no ``raise_for_status``) so the gateway can
    pass downstream status codes straight through.
    """

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def request(
        self,
        method: str,
        path: str,
        *,
        content: Optional[bytes] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.request(
                method, f"{self.base_url}{path}", content=content, headers=headers or {}
            )

    async def get(self, path: str, headers: Optional[dict] = None) -> httpx.Response:
        return await self.request("GET", path, headers=headers)


# Service client instances
users_client = ServiceClient(settings.USERS_SERVICE_URL)
wallet_client = ServiceClient(settings.WALLET_SERVICE_URL)
cups_client = ServiceClient(settings.CUPS_SERVICE_URL)
partners_client = ServiceClient(settings.PARTNERS_SERVICE_URL)
mobility_client = ServiceClient(settings.MOBILITY_SERVICE_URL)
kyc_client = ServiceClient(settings.KYC_SERVICE_URL)
rewards_client = ServiceClient(settings.REWARDS_SERVICE_URL)
social_client = ServiceClient(settings.SOCIAL_SERVICE_URL)
ai_client = ServiceClient(settings.AI_SERVICE_URL)
reports_client = ServiceClient(settings.REPORTS_SERVICE_URL)
