from __future__ import annotations

import logging
from typing import Optional

import requests
from pydantic import ValidationError

from client import messages
from client.api import InventoryApiClient
from schemas.upc import LookupFailure, LookupResult, LookupSuccess, ProductInfo

logger = logging.getLogger(__name__)


class ProductLookupClient:
    """
    Barcode lookup through the gated /upc-lookup endpoint.

    A `success: false` envelope means the code is unknown (the user should
    type the details in); an exception means the lookup itself broke (the user
    can retry). Both come back as LookupFailure, never raised.
    """

    def __init__(self, api: InventoryApiClient):
        self.api = api

    def lookup(self, code: Optional[str]) -> LookupResult:
        upc = (code or "").strip()
        if not upc:
            return LookupFailure(error=messages.MISSING_UPC, reason="invalid_code")

        try:
            envelope = self.api.lookup_upc(upc)
        except (requests.RequestException, ValueError) as e:
            logger.warning("UPC lookup failed: %r", e)
            return LookupFailure(error=messages.LOOKUP_FAILED, reason="lookup_failed")

        if not isinstance(envelope, dict) or not envelope.get("success"):
            error = envelope.get("error") if isinstance(envelope, dict) else None
            return LookupFailure(error=error or messages.BARCODE_NOT_FOUND, reason="not_found")

        data = dict(envelope.get("data") or {})
        data.setdefault("upc", upc)
        try:
            return LookupSuccess(data=ProductInfo.model_validate(data))
        except ValidationError as e:
            logger.warning("UPC lookup returned malformed data: %r", e)
            return LookupFailure(error=messages.LOOKUP_FAILED, reason="lookup_failed")
