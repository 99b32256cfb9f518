import logging
from typing import Optional
from urllib.parse import quote

import requests

from core.config import settings
from schemas.upc import LookupFailure, LookupResult, LookupSuccess, ProductInfo, is_not_found_payload

logger = logging.getLogger(__name__)


class UpcDatabaseClient:
    """
    Thin client for the third-party UPC database.

    Every outcome comes back as a LookupSuccess / LookupFailure value; callers
    never need to catch network or parse errors.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.upcdatabase.org/product",
        *,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, upc: str) -> str:
        return f"{self.base_url.rstrip('/')}/{quote(upc, safe='')}/{self.api_key}"

    def lookup(self, code: Optional[str]) -> LookupResult:
        upc = (code or "").strip()
        if not upc:
            return LookupFailure(error="Missing UPC", reason="invalid_code")

        try:
            resp = self.session.get(
                self._url(upc),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("UPC lookup for %s failed: %r", upc, e)
            return LookupFailure(error="UPC lookup failed", reason="lookup_failed")

        if resp.status_code >= 400:
            return LookupFailure(
                error=f"UPC lookup failed with status {resp.status_code}",
                reason="upstream_status",
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("UPC lookup for %s returned unparseable body: %r", upc, e)
            return LookupFailure(error="UPC lookup failed", reason="lookup_failed")

        if is_not_found_payload(payload):
            return LookupFailure(error="UPC not found", reason="not_found", status_code=404)

        return LookupSuccess(data=ProductInfo.from_upstream(upc, payload))


def make_upc_client() -> Optional[UpcDatabaseClient]:
    """Client built from settings; None when no API key is configured."""
    if not settings.upc_api_key:
        return None
    return UpcDatabaseClient(
        settings.upc_api_key,
        settings.upc_api_base,
        timeout=settings.upc_lookup_timeout,
    )
