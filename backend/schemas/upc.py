from typing import Any, Literal, Optional, Union

from pydantic import BaseModel


# Field-name variants seen in upstream UPC database payloads, in priority order.
NAME_FIELDS = ("title", "itemname", "description", "product")
CATEGORY_FIELDS = ("category", "department", "description")
BRAND_FIELDS = ("brand", "manufacturer", "company")
IMAGE_FIELDS = ("imageurl", "image")

NOT_FOUND_MARKERS = ("invalid", "error")


def _first_present(payload: dict, keys) -> Optional[str]:
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        value = str(value).strip()
        if value:
            return value
    return None


class ProductInfo(BaseModel):
    upc: str
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_upstream(cls, upc: str, payload: dict) -> "ProductInfo":
        return cls(
            upc=upc,
            name=_first_present(payload, NAME_FIELDS),
            category=_first_present(payload, CATEGORY_FIELDS),
            brand=_first_present(payload, BRAND_FIELDS),
            image=_first_present(payload, IMAGE_FIELDS),
        )


def is_not_found_payload(payload: Any) -> bool:
    """
    The upstream API reports misses inconsistently: an explicit success/valid
    flag, or a status/code string mentioning "invalid" or "error".
    """
    if not isinstance(payload, dict):
        return True
    if payload.get("success") is False or payload.get("valid") is False:
        return True
    status_field = str(payload.get("status") or payload.get("code") or "").lower()
    return any(marker in status_field for marker in NOT_FOUND_MARKERS)


LookupFailureReason = Literal["invalid_code", "not_found", "upstream_status", "lookup_failed"]


class LookupSuccess(BaseModel):
    success: Literal[True] = True
    data: ProductInfo


class LookupFailure(BaseModel):
    success: Literal[False] = False
    error: str
    reason: LookupFailureReason
    status_code: Optional[int] = None

    @property
    def not_found(self) -> bool:
        return self.reason == "not_found"


LookupResult = Union[LookupSuccess, LookupFailure]
