"""
Response Mappers - SDK objects to plain string-keyed mappings.

Only public attributes of the SDK objects are read.
"""

from datetime import UTC, datetime
from typing import Any

from purchases_bridge.exceptions import NotConfiguredError, PurchasesError
from purchases_bridge.models.api import (
    ErrorDetailsPayload,
    ProductPayload,
    PurchaseCompletedPayload,
    PurchaserInfoPayload,
)
from purchases_bridge.models.channel import CallResult
from purchases_bridge.models.sdk import Entitlement, Purchase, PurchaserInfo, SkuDetails

MICROS_PER_UNIT = 1_000_000


def format_date(value: datetime | None) -> str | None:
    """Format as UTC ISO-8601 with milliseconds, e.g. 2019-04-10T12:00:00.000Z."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


def _format_dates(dates: dict[str, datetime | None]) -> dict[str, str | None]:
    return {key: format_date(value) for key, value in dates.items()}


def _micros_to_amount(micros: int | None) -> float | None:
    if micros is None:
        return None
    return micros / MICROS_PER_UNIT


def map_purchaser_info(purchaser_info: PurchaserInfo) -> dict[str, Any]:
    """Map purchaser info; entitlement dates cover active entitlements only."""
    active = list(purchaser_info.active_entitlements)
    return PurchaserInfoPayload(
        active_subscriptions=list(purchaser_info.active_subscriptions),
        all_purchased_product_identifiers=list(purchaser_info.all_purchased_skus),
        active_entitlements=active,
        latest_expiration_date=format_date(purchaser_info.latest_expiration_date),
        all_expiration_dates=_format_dates(purchaser_info.all_expiration_dates_by_product),
        all_purchase_dates=_format_dates(purchaser_info.all_purchase_dates_by_product),
        expirations_for_active_entitlements={
            entitlement: format_date(purchaser_info.get_expiration_date_for_entitlement(entitlement))
            for entitlement in active
        },
        purchase_dates_for_active_entitlements={
            entitlement: format_date(purchaser_info.get_purchase_date_for_entitlement(entitlement))
            for entitlement in active
        },
        request_date=format_date(purchaser_info.request_date),
    ).to_wire()


def map_sku_details(sku_details: SkuDetails) -> dict[str, Any]:
    return ProductPayload(
        identifier=sku_details.sku,
        description=sku_details.description,
        title=sku_details.title,
        price=_micros_to_amount(sku_details.price_amount_micros),
        price_string=sku_details.price,
        currency_code=sku_details.price_currency_code,
        intro_price=_micros_to_amount(sku_details.introductory_price_amount_micros),
        intro_price_string=sku_details.introductory_price,
        intro_price_period=sku_details.introductory_price_period,
        intro_price_cycles=sku_details.introductory_price_cycles,
    ).to_wire()


def map_entitlements(entitlements: dict[str, Entitlement]) -> dict[str, Any]:
    """Map entitlement id -> offering id -> product (None without store details)."""
    return {
        entitlement_id: {
            offering_id: (
                map_sku_details(offering.sku_details)
                if offering.sku_details is not None
                else None
            )
            for offering_id, offering in entitlement.offerings.items()
        }
        for entitlement_id, entitlement in entitlements.items()
    }


def map_purchase(purchase: Purchase, purchaser_info: PurchaserInfo) -> dict[str, Any]:
    return PurchaseCompletedPayload(
        product_identifier=purchase.sku,
        purchaser_info=map_purchaser_info(purchaser_info),
    ).to_wire()


def map_error_details(error: PurchasesError) -> dict[str, str]:
    """Build the error triple, dropping an empty underlying message."""
    return ErrorDetailsPayload(
        message=error.message,
        readable_error_code=error.code.value,
        underlying_error_message=error.underlying_error_message or None,
    ).to_wire()


def reject(error: PurchasesError) -> CallResult:
    """Error completion coded with the SDK error's ordinal."""
    return CallResult.error(
        code=str(error.code.ordinal),
        message=error.message,
        details=map_error_details(error),
    )


def reject_not_configured(error: NotConfiguredError) -> CallResult:
    return CallResult.error(
        code=error.code,
        message=error.message,
        details=ErrorDetailsPayload(
            message=error.message,
            readable_error_code=error.readable_error_code,
        ).to_wire(),
    )
