"""
Purchases Plugin - Route channel method calls to the purchasing SDK.

Each handler reads its arguments, makes exactly one SDK call, and maps the
result. Arguments are not validated; missing ones reach the SDK as None.
"""

import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

from structlog import get_logger

from purchases_bridge.exceptions import NotConfiguredError, PurchasesError
from purchases_bridge.models.channel import CallResult, MethodCall
from purchases_bridge.models.sdk import ATTRIBUTION_NETWORKS_BY_SERVER_VALUE, ProductType
from purchases_bridge.observability import log_context, metrics, trace_operation
from purchases_bridge.services.events import EventSink, PurchaserInfoForwarder
from purchases_bridge.services.mappers import (
    map_entitlements,
    map_purchase,
    map_purchaser_info,
    map_sku_details,
    reject,
    reject_not_configured,
)
from purchases_bridge.services.purchases_sdk import PurchasesSDK

logger = get_logger(__name__)

Handler = Callable[[MethodCall], Awaitable[CallResult | None]]

# Static SDK entry points, callable before setupPurchases
UNCONFIGURED_METHODS = frozenset(
    {
        "setupPurchases",
        "addAttributionData",
        "setDebugLogsEnabled",
        "setAutomaticAttributionCollection",
    }
)


class PurchasesPlugin:
    """
    Call router over one owned SDK handle.

    Lifecycle: unconfigured until setupPurchases, back to unconfigured on
    close(). Completions of calls that straddle a close() are dropped.
    """

    def __init__(self, sdk: PurchasesSDK, events: EventSink) -> None:
        self._sdk = sdk
        self._events = events
        self._configured = False
        self._forwarder: PurchaserInfoForwarder | None = None
        # Bumped by close(); a call finishing under a newer generation is stale
        self._generation = 0
        self._handlers: dict[str, Handler] = {
            "setupPurchases": self._setup_purchases,
            "setAllowSharingStoreAccount": self._set_allow_sharing_store_account,
            "addAttributionData": self._add_attribution_data,
            "getEntitlements": self._get_entitlements,
            "getProductInfo": self._get_product_info,
            "makePurchase": self._make_purchase,
            "getAppUserID": self._get_app_user_id,
            "restoreTransactions": self._restore_transactions,
            "reset": self._reset,
            "identify": self._identify,
            "createAlias": self._create_alias,
            "setDebugLogsEnabled": self._set_debug_logs_enabled,
            "getPurchaserInfo": self._get_purchaser_info,
            "syncPurchases": self._sync_purchases,
            "setAutomaticAttributionCollection": self._set_automatic_attribution_collection,
        }

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def methods(self) -> frozenset[str]:
        return frozenset(self._handlers)

    async def handle(self, call: MethodCall) -> CallResult | None:
        """
        Dispatch one method call.

        Returns:
            The completion, or None for fire-and-forget methods and for
            completions dropped after close()

        Raises:
            Exception: Anything other than PurchasesError raised by the SDK,
                unless close() ran while the call was in flight
        """
        handler = self._handlers.get(call.method)
        if handler is None:
            logger.warning("method_not_implemented", method=call.method)
            metrics.record_method_call("unknown", "not_implemented", 0.0)
            return CallResult.not_implemented()

        generation = self._generation
        start_time = time.time()

        with (
            log_context(method=call.method, call_id=uuid4().hex),
            trace_operation(f"purchases.{call.method}", method=call.method) as span,
        ):
            metrics.method_calls_in_progress.labels(method=call.method).inc()
            try:
                if call.method not in UNCONFIGURED_METHODS and not self._configured:
                    raise NotConfiguredError(call.method)
                result = await handler(call)
            except NotConfiguredError as exc:
                logger.warning("method_call_before_setup")
                metrics.record_error(type(exc).__name__, call.method)
                result = reject_not_configured(exc)
            except PurchasesError as exc:
                if exc.user_cancelled:
                    logger.info("purchase_cancelled_by_user")
                else:
                    logger.warning(
                        "method_call_failed",
                        readable_error_code=exc.code.value,
                        error=exc.message,
                        underlying_error=exc.underlying_error_message,
                    )
                metrics.record_error(exc.code.value, call.method)
                result = reject(exc)
            except Exception as exc:
                if generation != self._generation:
                    logger.info("completion_dropped_after_close", error_type=type(exc).__name__)
                    span.set_attribute("outcome", "dropped")
                    metrics.record_method_call(call.method, "dropped", time.time() - start_time)
                    return None
                metrics.record_method_call(call.method, "exception", time.time() - start_time)
                metrics.record_error(type(exc).__name__, call.method)
                logger.exception("method_call_raised")
                raise
            finally:
                metrics.method_calls_in_progress.labels(method=call.method).dec()

            if generation != self._generation:
                logger.info("completion_dropped_after_close")
                result = None
                outcome = "dropped"
            else:
                outcome = result.kind.value if result is not None else "no_result"

            span.set_attribute("outcome", outcome)
            duration = time.time() - start_time
            metrics.record_method_call(call.method, outcome, duration)
            logger.info("method_call_completed", outcome=outcome, duration_seconds=duration)

        return result

    def close(self) -> None:
        """Tear down on host-view destruction."""
        self._generation += 1
        if self._forwarder is not None:
            self._forwarder.detach()
            self._forwarder = None
        if self._configured:
            self._sdk.close()
            self._configured = False
        logger.info("purchases_plugin_closed")

    # ========================================================================
    # Handlers
    # ========================================================================

    async def _setup_purchases(self, call: MethodCall) -> CallResult:
        api_key = call.argument("apiKey")
        app_user_id = call.argument("appUserId")
        observer_mode = call.argument("observerMode")

        if observer_mode is not None:
            self._sdk.configure(api_key, app_user_id, observer_mode)
        else:
            self._sdk.configure(api_key, app_user_id)

        if self._forwarder is not None:
            self._forwarder.detach()
        self._forwarder = PurchaserInfoForwarder(self._events)
        self._sdk.set_updated_purchaser_info_listener(self._forwarder)
        self._configured = True

        logger.info("purchases_configured", observer_mode=observer_mode)
        return CallResult.success(None)

    async def _set_allow_sharing_store_account(self, call: MethodCall) -> CallResult:
        self._sdk.set_allow_sharing_store_account(call.argument("allowSharing"))
        return CallResult.success(None)

    async def _add_attribution_data(self, call: MethodCall) -> None:
        network_value = call.argument("network")
        # bool and float keys would hash equal to an int server value
        network = (
            ATTRIBUTION_NETWORKS_BY_SERVER_VALUE.get(network_value)
            if type(network_value) is int
            else None
        )
        if network is None:
            logger.info("attribution_network_unmatched", network=network_value)
            return None

        self._sdk.add_attribution_data(
            call.argument("data"), network, call.argument("networkUserId")
        )
        return None

    async def _get_entitlements(self, call: MethodCall) -> CallResult:
        entitlements = await self._sdk.get_entitlements()
        return CallResult.success(map_entitlements(entitlements))

    async def _get_product_info(self, call: MethodCall) -> CallResult:
        product_ids = call.argument("productIdentifiers")
        product_type = call.argument("type") or ""

        if product_type.lower() == ProductType.SUBS.value:
            skus = await self._sdk.get_subscription_skus(product_ids)
        else:
            skus = await self._sdk.get_non_subscription_skus(product_ids)

        return CallResult.success([map_sku_details(sku) for sku in skus])

    async def _make_purchase(self, call: MethodCall) -> CallResult:
        purchase, purchaser_info = await self._sdk.make_purchase(
            call.argument("productIdentifier"),
            call.argument("type"),
            call.argument("oldSKUs"),
        )
        return CallResult.success(map_purchase(purchase, purchaser_info))

    async def _get_app_user_id(self, call: MethodCall) -> CallResult:
        return CallResult.success(self._sdk.get_app_user_id())

    async def _restore_transactions(self, call: MethodCall) -> CallResult:
        return CallResult.success(map_purchaser_info(await self._sdk.restore_purchases()))

    async def _reset(self, call: MethodCall) -> CallResult:
        return CallResult.success(map_purchaser_info(await self._sdk.reset()))

    async def _identify(self, call: MethodCall) -> CallResult:
        purchaser_info = await self._sdk.identify(call.argument("appUserID"))
        return CallResult.success(map_purchaser_info(purchaser_info))

    async def _create_alias(self, call: MethodCall) -> CallResult:
        purchaser_info = await self._sdk.create_alias(call.argument("newAppUserID"))
        return CallResult.success(map_purchaser_info(purchaser_info))

    async def _set_debug_logs_enabled(self, call: MethodCall) -> CallResult:
        self._sdk.set_debug_logs_enabled(bool(call.argument("enabled")))
        return CallResult.success(None)

    async def _get_purchaser_info(self, call: MethodCall) -> CallResult:
        return CallResult.success(map_purchaser_info(await self._sdk.get_purchaser_info()))

    async def _sync_purchases(self, call: MethodCall) -> CallResult:
        self._sdk.sync_purchases()
        return CallResult.success(None)

    async def _set_automatic_attribution_collection(self, call: MethodCall) -> None:
        return None
