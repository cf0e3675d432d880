"""
Exception Classes - Strongly typed exception hierarchy.

PurchasesError is the purchasing SDK's own failure type. The bridge maps it to
an error completion; every other exception propagates to the caller.
"""

from purchases_bridge.models.sdk import PurchasesErrorCode


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    pass


class NotConfiguredError(BridgeError):
    """Raised when a method needs the SDK before setupPurchases was called."""

    code = "not_configured"
    readable_error_code = "NotConfiguredError"

    def __init__(self, method: str) -> None:
        self.method = method
        self.message = f"Purchases must be configured before calling {method}"
        super().__init__(self.message)


class SDKFactoryError(BridgeError):
    """Raised when the configured SDK factory cannot be loaded or called."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"SDK factory {path!r} failed: {message}")


class PurchasesError(Exception):
    """Failure reported by the purchasing SDK."""

    def __init__(
        self,
        code: PurchasesErrorCode,
        message: str | None = None,
        underlying_error_message: str | None = None,
    ) -> None:
        self.code = code
        self.message = message or code.description
        self.underlying_error_message = underlying_error_message
        super().__init__(self.message)

    @property
    def user_cancelled(self) -> bool:
        """True when the user backed out of the purchase flow."""
        return self.code is PurchasesErrorCode.PURCHASE_CANCELLED_ERROR
