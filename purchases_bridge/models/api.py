"""
API Models - Pydantic models for mapped SDK records and the channel transport.

Field aliases are the wire names the host shell reads.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ============================================================================
# Mapped SDK Records
# ============================================================================


class WireModel(BaseModel):
    """Base for records serialized under their wire aliases."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class PurchaserInfoPayload(WireModel):
    """Purchaser info as sent to the host shell."""

    active_subscriptions: list[str] = Field(alias="activeSubscriptions")
    all_purchased_product_identifiers: list[str] = Field(alias="allPurchasedProductIdentifiers")
    active_entitlements: list[str] = Field(alias="activeEntitlements")
    latest_expiration_date: str | None = Field(alias="latestExpirationDate")
    all_expiration_dates: dict[str, str | None] = Field(alias="allExpirationDates")
    all_purchase_dates: dict[str, str | None] = Field(alias="allPurchaseDates")
    expirations_for_active_entitlements: dict[str, str | None] = Field(
        alias="expirationsForActiveEntitlements"
    )
    purchase_dates_for_active_entitlements: dict[str, str | None] = Field(
        alias="purchaseDatesForActiveEntitlements"
    )
    request_date: str | None = Field(alias="requestDate")


class ProductPayload(WireModel):
    """Store product as sent to the host shell."""

    identifier: str
    description: str
    title: str
    price: float
    price_string: str
    currency_code: str
    intro_price: float | None = None
    intro_price_string: str | None = None
    intro_price_period: str | None = None
    intro_price_cycles: int | None = None


class PurchaseCompletedPayload(WireModel):
    """makePurchase success value."""

    product_identifier: str = Field(alias="productIdentifier")
    purchaser_info: dict[str, Any] = Field(alias="purchaserInfo")


class ErrorDetailsPayload(WireModel):
    """Error triple; underlyingErrorMessage is omitted when empty."""

    message: str
    readable_error_code: str
    underlying_error_message: str | None = Field(None, alias="underlyingErrorMessage")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================================
# Transport Models
# ============================================================================


class MethodCallRequest(BaseModel):
    """POST /v1/channels/{channel}/calls request body."""

    method: str = Field(..., min_length=1, max_length=255)
    arguments: dict[str, Any] = Field(default_factory=dict)


class CallStatus(str, Enum):
    """Outcome of one method call as seen by the host shell."""

    SUCCESS = "success"
    ERROR = "error"
    NOT_IMPLEMENTED = "not_implemented"
    NO_RESULT = "no_result"


class MethodCallResponse(BaseModel):
    """POST /v1/channels/{channel}/calls response."""

    status: CallStatus
    result: Any = None
    code: str | None = None
    message: str | None = None
    details: dict[str, str] | None = None


class ChannelEvent(BaseModel):
    """Event pushed to the host shell over the event channel."""

    event: str
    arguments: dict[str, Any] | None = None
