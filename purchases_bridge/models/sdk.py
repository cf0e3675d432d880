"""
Purchasing SDK value types - Immutable dataclasses owned by the SDK.

The bridge only reads these; it never builds or validates them itself.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class PurchasesErrorCode(str, Enum):
    """
    SDK error codes.

    Member order is part of the wire contract: the ordinal position is sent
    as the numeric error code.
    """

    UNKNOWN_ERROR = "UnknownError"
    PURCHASE_CANCELLED_ERROR = "PurchaseCancelledError"
    STORE_PROBLEM_ERROR = "StoreProblemError"
    PURCHASE_NOT_ALLOWED_ERROR = "PurchaseNotAllowedError"
    PURCHASE_INVALID_ERROR = "PurchaseInvalidError"
    PRODUCT_NOT_AVAILABLE_FOR_PURCHASE_ERROR = "ProductNotAvailableForPurchaseError"
    PRODUCT_ALREADY_PURCHASED_ERROR = "ProductAlreadyPurchasedError"
    RECEIPT_ALREADY_IN_USE_ERROR = "ReceiptAlreadyInUseError"
    INVALID_RECEIPT_ERROR = "InvalidReceiptError"
    MISSING_RECEIPT_FILE_ERROR = "MissingReceiptFileError"
    NETWORK_ERROR = "NetworkError"
    INVALID_CREDENTIALS_ERROR = "InvalidCredentialsError"
    UNEXPECTED_BACKEND_RESPONSE_ERROR = "UnexpectedBackendResponseError"
    RECEIPT_IN_USE_BY_OTHER_SUBSCRIBER_ERROR = "ReceiptInUseByOtherSubscriberError"
    INVALID_APP_USER_ID_ERROR = "InvalidAppUserIdError"
    OPERATION_ALREADY_IN_PROGRESS_ERROR = "OperationAlreadyInProgressError"
    UNKNOWN_BACKEND_ERROR = "UnknownBackendError"

    @property
    def ordinal(self) -> int:
        """Position of the code in declaration order."""
        return list(PurchasesErrorCode).index(self)

    @property
    def description(self) -> str:
        """Default human-readable message for the code."""
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS: dict[PurchasesErrorCode, str] = {
    PurchasesErrorCode.UNKNOWN_ERROR: "Unknown error.",
    PurchasesErrorCode.PURCHASE_CANCELLED_ERROR: "Purchase was cancelled.",
    PurchasesErrorCode.STORE_PROBLEM_ERROR: "There was a problem with the store.",
    PurchasesErrorCode.PURCHASE_NOT_ALLOWED_ERROR: (
        "The device or user is not allowed to make the purchase."
    ),
    PurchasesErrorCode.PURCHASE_INVALID_ERROR: (
        "One or more of the arguments provided are invalid."
    ),
    PurchasesErrorCode.PRODUCT_NOT_AVAILABLE_FOR_PURCHASE_ERROR: (
        "The product is not available for purchase."
    ),
    PurchasesErrorCode.PRODUCT_ALREADY_PURCHASED_ERROR: (
        "This product is already active for the user."
    ),
    PurchasesErrorCode.RECEIPT_ALREADY_IN_USE_ERROR: (
        "There is already another active subscriber using the same receipt."
    ),
    PurchasesErrorCode.INVALID_RECEIPT_ERROR: "The receipt is not valid.",
    PurchasesErrorCode.MISSING_RECEIPT_FILE_ERROR: "The receipt is missing.",
    PurchasesErrorCode.NETWORK_ERROR: "Error performing request.",
    PurchasesErrorCode.INVALID_CREDENTIALS_ERROR: (
        "There was a credentials issue. Check the underlying error for more details."
    ),
    PurchasesErrorCode.UNEXPECTED_BACKEND_RESPONSE_ERROR: (
        "Received malformed response from the backend."
    ),
    PurchasesErrorCode.RECEIPT_IN_USE_BY_OTHER_SUBSCRIBER_ERROR: (
        "The receipt is in use by other subscriber."
    ),
    PurchasesErrorCode.INVALID_APP_USER_ID_ERROR: "The app user id is not valid.",
    PurchasesErrorCode.OPERATION_ALREADY_IN_PROGRESS_ERROR: (
        "The operation is already in progress."
    ),
    PurchasesErrorCode.UNKNOWN_BACKEND_ERROR: "There was an unknown backend error.",
}


class AttributionNetwork(Enum):
    """Attribution networks, valued by their numeric server value."""

    ADJUST = 1
    APPSFLYER = 2
    BRANCH = 3
    TENJIN = 4
    FACEBOOK = 5
    MPARTICLE = 6

    @property
    def server_value(self) -> int:
        return self.value


ATTRIBUTION_NETWORKS_BY_SERVER_VALUE: dict[int, AttributionNetwork] = {
    network.server_value: network for network in AttributionNetwork
}


class ProductType(str, Enum):
    """Store product types."""

    SUBS = "subs"
    INAPP = "inapp"


@dataclass(frozen=True)
class SkuDetails:
    """Store listing for one product."""

    sku: str
    title: str
    description: str
    price: str  # formatted, e.g. "$4.99"
    price_amount_micros: int
    price_currency_code: str
    type: ProductType = ProductType.INAPP
    introductory_price: str | None = None
    introductory_price_amount_micros: int | None = None
    introductory_price_period: str | None = None  # ISO-8601 period, e.g. "P1W"
    introductory_price_cycles: int | None = None


@dataclass(frozen=True)
class Offering:
    """One way of unlocking an entitlement."""

    active_product_identifier: str
    sku_details: SkuDetails | None = None


@dataclass(frozen=True)
class Entitlement:
    """Named access right and the offerings that grant it."""

    offerings: dict[str, Offering] = field(default_factory=dict)


@dataclass(frozen=True)
class PurchaserInfo:
    """Snapshot of a user's purchases as computed by the SDK."""

    active_subscriptions: tuple[str, ...] = ()
    all_purchased_skus: tuple[str, ...] = ()
    active_entitlements: tuple[str, ...] = ()
    latest_expiration_date: datetime | None = None
    all_expiration_dates_by_product: dict[str, datetime | None] = field(default_factory=dict)
    all_purchase_dates_by_product: dict[str, datetime | None] = field(default_factory=dict)
    expiration_dates_by_entitlement: dict[str, datetime | None] = field(default_factory=dict)
    purchase_dates_by_entitlement: dict[str, datetime | None] = field(default_factory=dict)
    request_date: datetime | None = None

    def get_expiration_date_for_entitlement(self, entitlement: str) -> datetime | None:
        return self.expiration_dates_by_entitlement.get(entitlement)

    def get_purchase_date_for_entitlement(self, entitlement: str) -> datetime | None:
        return self.purchase_dates_by_entitlement.get(entitlement)


@dataclass(frozen=True)
class Purchase:
    """Completed store purchase."""

    sku: str
    order_id: str
    purchase_token: str
    purchase_time_millis: int
