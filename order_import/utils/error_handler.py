"""
Custom exception hierarchy for the order import.

Every error raised by this package derives from `AppException`, which carries
a standardized error code, severity and retry hints so that batch reports and
the surrounding application can treat failures uniformly.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Standardized error codes.
    """

    # General
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Connections
    REMOTE_CONNECTION_FAILED = "REMOTE_CONNECTION_FAILED"
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Sync
    SYNC_FAILED = "SYNC_FAILED"
    SYNC_DUPLICATE_ERROR = "SYNC_DUPLICATE_ERROR"
    CUSTOMER_RESOLUTION_FAILED = "CUSTOMER_RESOLUTION_FAILED"
    LEDGER_WRITE_FAILED = "LEDGER_WRITE_FAILED"


class ErrorSeverity(Enum):
    """
    Error severity levels.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Base exception for all application errors.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
        is_critical: bool = False,
    ):
        """
        Initializes the exception.

        Args:
            message: Error message
            error_code: Standardized error code
            details: Additional error information
            severity: Error severity
            is_retryable: Whether the operation can be retried
            is_critical: Whether it needs immediate attention
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.severity = severity
        self.is_retryable = is_retryable
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the exception to a dictionary.

        Returns:
            Dict: Exception representation
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "is_critical": self.is_critical,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Data validation error.
    """

    def __init__(self, message: str, field: str, invalid_value: Any = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
            }
        )


class InvalidPhoneError(ValidationException):
    """
    Phone number that cannot be turned into an international number.

    Never fatal: callers drop the phone and keep going.
    """

    def __init__(self, raw_phone: Any, **kwargs):
        super().__init__(
            message=f"Invalid phone number: {raw_phone!r}",
            field="phone",
            invalid_value=raw_phone,
            **kwargs,
        )


class ConfigMissingError(AppException):
    """
    No remote connection settings stored for a shop.
    """

    def __init__(self, shop: str, **kwargs):
        super().__init__(
            message=f"Ticimax connection settings are not configured for shop {shop}",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.shop = shop
        self.details.update({"shop": shop})


class RemoteConnectionError(AppException):
    """
    Remote order service unreachable, or it answered with a non-data payload
    (e.g. an HTML error page instead of a service description).
    """

    def __init__(self, message: str, endpoint: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.REMOTE_CONNECTION_FAILED,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.endpoint = endpoint
        self.details.update({"endpoint": endpoint})


class ShopifyAPIException(AppException):
    """
    Shopify Admin API error (transport, HTTP status or GraphQL errors).
    """

    def __init__(
        self,
        message: str,
        api_response_code: Optional[int] = None,
        user_errors: Optional[List[Dict[str, Any]]] = None,
        rate_limited: bool = False,
        retry_after: Optional[int] = None,
        **kwargs,
    ):
        """
        Initializes the Shopify API exception.

        Args:
            message: Error message
            api_response_code: HTTP status returned by Shopify
            user_errors: GraphQL `userErrors` payload, when present
            rate_limited: Whether the error comes from throttling
            retry_after: Seconds to wait before retrying
            **kwargs: Extra AppException arguments
        """
        error_code = ErrorCode.RATE_LIMIT_EXCEEDED if rate_limited else ErrorCode.SHOPIFY_API_ERROR
        severity = ErrorSeverity.HIGH if api_response_code and api_response_code >= 500 else ErrorSeverity.MEDIUM

        super().__init__(
            message=message,
            error_code=error_code,
            severity=severity,
            # userErrors are business rejections, retrying does not help
            is_retryable=not user_errors,
            **kwargs,
        )
        self.api_response_code = api_response_code
        self.user_errors = user_errors or []
        self.rate_limited = rate_limited
        self.retry_after = retry_after
        self.details.update(
            {
                "api_response_code": api_response_code,
                "user_errors": self.user_errors,
                "rate_limited": rate_limited,
                "retry_after": retry_after,
            }
        )


class ResolutionFailure(AppException):
    """
    Customer lookup or creation rejected by the host API.
    """

    def __init__(self, message: str, order_number: Optional[str] = None, host_error: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.CUSTOMER_RESOLUTION_FAILED,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.order_number = order_number
        self.host_error = host_error or message
        self.details.update({"order_number": order_number, "host_error": self.host_error})


class DuplicateError(AppException):
    """
    Source order already has a `synced` ledger row.

    Expected, non-alarming outcome of re-running a sync.
    """

    def __init__(
        self,
        shop: str,
        order_number: str,
        host_order_name: Optional[str] = None,
        host_order_id: Optional[str] = None,
        **kwargs,
    ):
        existing = host_order_name or host_order_id or "unknown host order"
        super().__init__(
            message=f"Order #{order_number} was already imported as {existing}",
            error_code=ErrorCode.SYNC_DUPLICATE_ERROR,
            severity=ErrorSeverity.LOW,
            is_retryable=False,
            **kwargs,
        )
        self.shop = shop
        self.order_number = order_number
        self.host_order_name = host_order_name
        self.host_order_id = host_order_id
        self.details.update(
            {
                "shop": shop,
                "order_number": order_number,
                "host_order_name": host_order_name,
                "host_order_id": host_order_id,
            }
        )


class TransferFailure(AppException):
    """
    Host order creation rejected or failed.
    """

    def __init__(self, message: str, order_number: Optional[str] = None, host_error: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.SYNC_FAILED,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.order_number = order_number
        self.host_error = host_error or message
        self.details.update({"order_number": order_number, "host_error": self.host_error})


class LedgerException(AppException):
    """
    Sync ledger storage failure.
    """

    def __init__(self, message: str, operation: str, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.LEDGER_WRITE_FAILED,
            severity=ErrorSeverity.CRITICAL,
            is_critical=True,
            **kwargs,
        )
        self.operation = operation
        self.details.update({"operation": operation})


# === UTILITIES ===


def convert_to_app_exception(exception: Exception, context: Optional[Dict[str, Any]] = None) -> AppException:
    """
    Wraps a foreign exception into an AppException.

    Args:
        exception: Exception to convert
        context: Additional context

    Returns:
        AppException: Converted exception
    """
    if isinstance(exception, AppException):
        return exception

    context = context or {}
    exception_type = type(exception).__name__
    return AppException(
        message=f"{exception_type}: {exception}",
        details={"original_exception": exception_type, **context},
    )


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Logs an error consistently.

    Args:
        exception: Exception to log
        context: Additional context
        level: Logging level
    """
    context = context or {}
    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
                "is_critical": exception.is_critical,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {exception}"
        log_data["traceback"] = traceback.format_exc()

    logger.log(level, message, extra=log_data)


class ErrorAggregator:
    """
    Collects errors raised while processing a batch.
    """

    def __init__(self):
        self.errors: List[AppException] = []
        self.warnings: List[AppException] = []
        self.total_processed = 0
        self.start_time = datetime.now(timezone.utc)

    def add_error(self, exception: Union[AppException, Exception], context: Optional[Dict] = None):
        """
        Adds an error to the aggregator.

        Args:
            exception: Exception to record
            context: Additional context
        """
        if not isinstance(exception, AppException):
            exception = convert_to_app_exception(exception, context)
        elif context:
            exception.details.update(context)

        if exception.severity in (ErrorSeverity.LOW, ErrorSeverity.MEDIUM):
            self.warnings.append(exception)
        else:
            self.errors.append(exception)

        if exception.is_critical:
            log_error(exception, context, logging.CRITICAL)

    def increment_processed(self):
        self.total_processed += 1

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def get_summary(self) -> Dict[str, Any]:
        """
        Returns an error summary.

        Returns:
            Dict: Summary with counts and serialized errors
        """
        end_time = datetime.now(timezone.utc)
        return {
            "total_processed": self.total_processed,
            "error_count": len(self.errors),
            "warning_count": len(self.warnings),
            "duration_seconds": (end_time - self.start_time).total_seconds(),
            "start_time": self.start_time.isoformat(),
            "end_time": end_time.isoformat(),
            "errors": [error.to_dict() for error in self.errors],
            "warnings": [warning.to_dict() for warning in self.warnings],
        }

    def clear(self):
        self.errors.clear()
        self.warnings.clear()
        self.total_processed = 0
        self.start_time = datetime.now(timezone.utc)
