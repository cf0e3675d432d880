"""
Pytest Configuration and Centralized Fixtures.

Provides reusable stubs and fixtures for testing:
- Purchasing SDK stub (MagicMock specced on the protocol, async members are AsyncMock)
- Recording event sink
- Plugins in unconfigured and configured states
- SDK value objects with known accessor values
"""

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from helpers import RecordingSink, create_purchaser_info, create_sku_details

from purchases_bridge.models.channel import MethodCall
from purchases_bridge.models.sdk import Entitlement, Offering, Purchase, PurchaserInfo, SkuDetails
from purchases_bridge.services.plugin import PurchasesPlugin
from purchases_bridge.services.purchases_sdk import PurchasesSDK

# ============================================================================
# SDK Stub Fixtures
# ============================================================================


@pytest.fixture
def sdk() -> MagicMock:
    """Purchasing SDK stub; coroutine methods are AsyncMocks."""
    return MagicMock(spec=PurchasesSDK)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def plugin(sdk: MagicMock, sink: RecordingSink) -> PurchasesPlugin:
    """Plugin before setupPurchases."""
    return PurchasesPlugin(sdk, sink)


@pytest.fixture
async def configured_plugin(plugin: PurchasesPlugin, sdk: MagicMock) -> PurchasesPlugin:
    """Plugin after a successful setupPurchases; stub call history is cleared."""
    await plugin.handle(
        MethodCall("setupPurchases", {"apiKey": "api_key", "appUserId": "user_123"})
    )
    sdk.reset_mock()
    return plugin


# ============================================================================
# SDK Value Fixtures
# ============================================================================


@pytest.fixture
def purchaser_info() -> PurchaserInfo:
    return create_purchaser_info()


@pytest.fixture
def sku_details() -> SkuDetails:
    return create_sku_details()


@pytest.fixture
def entitlements(sku_details: SkuDetails) -> dict[str, Entitlement]:
    """One entitlement with a listed and an unlisted offering."""
    return {
        "pro": Entitlement(
            offerings={
                "monthly": Offering(
                    active_product_identifier="monthly_pro", sku_details=sku_details
                ),
                "annual": Offering(active_product_identifier="annual_pro", sku_details=None),
            }
        )
    }


@pytest.fixture
def purchase() -> Purchase:
    return Purchase(
        sku="monthly_pro",
        order_id="GPA.1234-5678-9012",
        purchase_token="token_abcdefghij",
        purchase_time_millis=1554897600000,
    )


# ============================================================================
# API Fixtures
# ============================================================================


@pytest.fixture
def client(sdk: MagicMock) -> Iterator[TestClient]:
    """Test client running the app lifespan around the SDK stub."""
    from purchases_bridge.main import create_app

    with TestClient(create_app(sdk=sdk)) as test_client:
        yield test_client
