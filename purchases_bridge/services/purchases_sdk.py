"""
Purchasing SDK Protocol - The collaborator surface the bridge forwards to.

Any purchasing SDK binding must implement this interface. Network-backed
operations are coroutines that return the SDK's value types or raise
PurchasesError; local setters and getters are plain methods.

Platform handles (application context, foreground activity) belong to the
binding and are not passed through the channel.
"""

import importlib
from collections.abc import Callable
from typing import Protocol

from structlog import get_logger

from purchases_bridge.exceptions import SDKFactoryError
from purchases_bridge.models.sdk import (
    AttributionNetwork,
    Entitlement,
    Purchase,
    PurchaserInfo,
    SkuDetails,
)

logger = get_logger(__name__)

UpdatedPurchaserInfoListener = Callable[[PurchaserInfo], None]


class PurchasesSDK(Protocol):
    """
    Purchasing SDK protocol.

    Calling anything other than configure, add_attribution_data or
    set_debug_logs_enabled before configure is undefined in the SDK itself;
    the bridge refuses such calls.

    Plain methods, including configure and sync_purchases, are called on the
    event loop and must not block: a binding that needs the network there
    schedules the work and returns immediately.
    """

    def configure(
        self, api_key: str, app_user_id: str | None, observer_mode: bool | None = None
    ) -> None:
        """
        Configure the shared SDK instance.

        Args:
            api_key: Public SDK key
            app_user_id: Known user id, or None for an anonymous user
            observer_mode: None keeps the SDK default
        """
        ...

    def set_updated_purchaser_info_listener(
        self, listener: UpdatedPurchaserInfoListener | None
    ) -> None:
        """
        Install the listener for pushed purchaser info; None removes it.

        The SDK may call the listener from any thread.
        """
        ...

    def set_allow_sharing_store_account(self, allow_sharing: bool) -> None: ...

    def add_attribution_data(
        self,
        data: dict[str, str],
        network: AttributionNetwork,
        network_user_id: str | None,
    ) -> None: ...

    async def get_entitlements(self) -> dict[str, Entitlement]:
        """
        Fetch entitlements keyed by entitlement id.

        Raises:
            PurchasesError: If the fetch fails
        """
        ...

    async def get_subscription_skus(self, product_ids: list[str]) -> list[SkuDetails]: ...

    async def get_non_subscription_skus(self, product_ids: list[str]) -> list[SkuDetails]: ...

    async def make_purchase(
        self,
        product_id: str,
        product_type: str | None,
        old_skus: list[str] | None,
    ) -> tuple[Purchase, PurchaserInfo]:
        """
        Run the store purchase flow.

        Returns:
            The completed purchase and the refreshed purchaser info

        Raises:
            PurchasesError: If the purchase fails; a user cancellation is
                reported with PurchasesErrorCode.PURCHASE_CANCELLED_ERROR
        """
        ...

    def get_app_user_id(self) -> str: ...

    async def restore_purchases(self) -> PurchaserInfo: ...

    async def reset(self) -> PurchaserInfo: ...

    async def identify(self, app_user_id: str) -> PurchaserInfo: ...

    async def create_alias(self, new_app_user_id: str) -> PurchaserInfo: ...

    def set_debug_logs_enabled(self, enabled: bool) -> None: ...

    async def get_purchaser_info(self) -> PurchaserInfo: ...

    def sync_purchases(self) -> None:
        """Start a background sync of store purchases; returns without waiting."""
        ...

    def close(self) -> None:
        """Release the shared instance."""
        ...


def load_sdk(path: str) -> PurchasesSDK:
    """
    Build the SDK from a "package.module:attribute" factory path.

    Raises:
        SDKFactoryError: If the path is empty, cannot be imported, or the
            factory raises
    """
    if not path:
        raise SDKFactoryError(path, "no SDK factory configured")

    module_name, _, attribute = path.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SDKFactoryError(path, f"cannot import {module_name}: {exc}") from exc

    factory = getattr(module, attribute, None)
    if not callable(factory):
        raise SDKFactoryError(path, f"{attribute} is not a callable in {module_name}")

    try:
        sdk = factory()
    except Exception as exc:
        logger.exception("sdk_factory_failed", path=path)
        raise SDKFactoryError(path, str(exc)) from exc

    logger.info("sdk_loaded", path=path, sdk_type=type(sdk).__name__)
    return sdk  # type: ignore[no-any-return]
