"""
Shared test helpers - SDK value factories, their wire forms, and a recording sink.
"""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

from purchases_bridge.models.sdk import ProductType, PurchaserInfo, SkuDetails


class RecordingSink:
    """Event sink that keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any] | None]] = []

    def send_event(self, name: str, arguments: dict[str, Any] | None) -> None:
        self.events.append((name, arguments))


def installed_listener(sdk: MagicMock) -> Any:
    """The update listener the plugin last handed to the SDK."""
    return sdk.set_updated_purchaser_info_listener.call_args.args[0]


def create_purchaser_info(**overrides: Any) -> PurchaserInfo:
    """Factory for purchaser info with one active entitlement."""
    values: dict[str, Any] = {
        "active_subscriptions": ("monthly_pro",),
        "all_purchased_skus": ("monthly_pro", "lifetime_unlock"),
        "active_entitlements": ("pro",),
        "latest_expiration_date": datetime(2019, 5, 10, 12, 0, tzinfo=UTC),
        "all_expiration_dates_by_product": {
            "monthly_pro": datetime(2019, 5, 10, 12, 0, tzinfo=UTC),
            "lifetime_unlock": None,
        },
        "all_purchase_dates_by_product": {
            "monthly_pro": datetime(2019, 4, 10, 12, 0, tzinfo=UTC),
            "lifetime_unlock": datetime(2019, 1, 2, 3, 4, 5, 678000, tzinfo=UTC),
        },
        "expiration_dates_by_entitlement": {
            "pro": datetime(2019, 5, 10, 12, 0, tzinfo=UTC),
            "legacy": datetime(2018, 1, 1, tzinfo=UTC),
        },
        "purchase_dates_by_entitlement": {
            "pro": datetime(2019, 4, 10, 12, 0, tzinfo=UTC),
            "legacy": datetime(2017, 1, 1, tzinfo=UTC),
        },
        "request_date": datetime(2019, 4, 10, 12, 30, tzinfo=UTC),
    }
    values.update(overrides)
    return PurchaserInfo(**values)


# Wire form of create_purchaser_info()
PURCHASER_INFO_WIRE: dict[str, Any] = {
    "activeSubscriptions": ["monthly_pro"],
    "allPurchasedProductIdentifiers": ["monthly_pro", "lifetime_unlock"],
    "activeEntitlements": ["pro"],
    "latestExpirationDate": "2019-05-10T12:00:00.000Z",
    "allExpirationDates": {
        "monthly_pro": "2019-05-10T12:00:00.000Z",
        "lifetime_unlock": None,
    },
    "allPurchaseDates": {
        "monthly_pro": "2019-04-10T12:00:00.000Z",
        "lifetime_unlock": "2019-01-02T03:04:05.678Z",
    },
    "expirationsForActiveEntitlements": {"pro": "2019-05-10T12:00:00.000Z"},
    "purchaseDatesForActiveEntitlements": {"pro": "2019-04-10T12:00:00.000Z"},
    "requestDate": "2019-04-10T12:30:00.000Z",
}


def create_sku_details(
    sku: str = "monthly_pro",
    product_type: ProductType = ProductType.SUBS,
    **overrides: Any,
) -> SkuDetails:
    """Factory for store listings."""
    values: dict[str, Any] = {
        "sku": sku,
        "title": "Pro (Monthly)",
        "description": "All pro features",
        "price": "$4.99",
        "price_amount_micros": 4_990_000,
        "price_currency_code": "USD",
        "type": product_type,
    }
    values.update(overrides)
    return SkuDetails(**values)


# Wire form of create_sku_details()
SKU_DETAILS_WIRE: dict[str, Any] = {
    "identifier": "monthly_pro",
    "description": "All pro features",
    "title": "Pro (Monthly)",
    "price": 4.99,
    "price_string": "$4.99",
    "currency_code": "USD",
    "intro_price": None,
    "intro_price_string": None,
    "intro_price_period": None,
    "intro_price_cycles": None,
}


def build_stub_sdk() -> MagicMock:
    """Zero-argument SDK factory for load_sdk tests."""
    from purchases_bridge.services.purchases_sdk import PurchasesSDK

    return MagicMock(spec=PurchasesSDK)


def failing_sdk_factory() -> MagicMock:
    """SDK factory that cannot reach the store."""
    raise RuntimeError("billing service unavailable")


NOT_A_FACTORY = "purchases"
