"""
Inventory API client.

Every call fetches a token from the token source, sends it as
`Authorization: Bearer <token>`, and hands the JSON envelope
(`{success, data?, error?}`) back untouched. HTTP error statuses are not
raised; `success` is the only failure signal. Network errors and
unparseable bodies propagate to the caller. A 401 makes the token source
forget its token, so the next call logs in again.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional, Union
from uuid import UUID

import requests
from pydantic import BaseModel

from client.session import SessionTokenSource, TokenSource


def _body(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude={"id", "last_updated"})
    return dict(payload)


class InventoryApiClient:
    def __init__(
        self,
        base_url: str,
        token_source: TokenSource,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 30,
    ):
        self.base_url = base_url
        self.token_source = token_source
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if with_body:
            headers["Content-Type"] = "application/json"
        token = self.token_source()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"
        resp = self.session.request(
            method,
            url,
            json=json,
            params=params,
            headers=self._headers(with_body=json is not None),
            timeout=self.timeout,
        )
        if resp.status_code == 401:
            # Expired or revoked token: drop it so the next call logs in again.
            logout = getattr(self.token_source, "logout", None)
            if logout is not None:
                logout()
        return resp.json()

    # ----------------------------
    # Inventory CRUD
    # ----------------------------

    def fetch_inventory(
        self,
        page: int = 1,
        page_size: int = 50,
        *,
        category: Optional[str] = None,
        q: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if category:
            params["category"] = category
        if q:
            params["q"] = q
        return self._request("GET", "/inventory", params=params)

    def get_item(self, item_id: Union[str, UUID]) -> Dict[str, Any]:
        return self._request("GET", f"/inventory/{item_id}")

    def low_stock_items(self) -> Dict[str, Any]:
        return self._request("GET", "/inventory/low-stock")

    def create_item(self, body: Any) -> Dict[str, Any]:
        return self._request("POST", "/inventory", json=_body(body))

    def update_item(self, item_id: Union[str, UUID], body: Any) -> Dict[str, Any]:
        return self._request("PATCH", f"/inventory/{item_id}", json=_body(body))

    def delete_item(self, item_id: Union[str, UUID]) -> Dict[str, Any]:
        return self._request("DELETE", f"/inventory/{item_id}")

    # ----------------------------
    # Barcode lookup
    # ----------------------------

    def lookup_upc(self, upc: str) -> Dict[str, Any]:
        return self._request("GET", "/upc-lookup", params={"upc": upc})


def make_client_from_env() -> InventoryApiClient:
    base_url = os.getenv("INVENTORY_API_URL", "").strip()
    email = os.getenv("INVENTORY_API_EMAIL", "").strip() or None
    password = os.getenv("INVENTORY_API_PASSWORD", "").strip() or None
    token = os.getenv("INVENTORY_API_TOKEN", "").strip() or None

    if not base_url:
        raise RuntimeError("Missing INVENTORY_API_URL")
    if not token and not (email and password):
        raise RuntimeError("Set INVENTORY_API_TOKEN or INVENTORY_API_EMAIL + INVENTORY_API_PASSWORD")

    session = requests.Session()
    tokens = SessionTokenSource(base_url, email, password, token=token, session=session)
    return InventoryApiClient(base_url, tokens, session=session)
