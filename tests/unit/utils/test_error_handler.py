"""Unit tests for the error taxonomy."""

from order_import.utils.error_handler import (
    ConfigMissingError,
    DuplicateError,
    ErrorAggregator,
    ErrorCode,
    ErrorSeverity,
    LedgerException,
    RemoteConnectionError,
    ResolutionFailure,
    ShopifyAPIException,
    TransferFailure,
)


class TestErrorCodes:
    def test_each_error_has_its_code(self):
        assert RemoteConnectionError("down").error_code == ErrorCode.REMOTE_CONNECTION_FAILED
        assert ConfigMissingError("shop").error_code == ErrorCode.CONFIGURATION_ERROR
        assert ResolutionFailure("nope").error_code == ErrorCode.CUSTOMER_RESOLUTION_FAILED
        assert DuplicateError("shop", "1").error_code == ErrorCode.SYNC_DUPLICATE_ERROR
        assert TransferFailure("nope").error_code == ErrorCode.SYNC_FAILED
        assert ShopifyAPIException("nope").error_code == ErrorCode.SHOPIFY_API_ERROR
        assert LedgerException("nope", operation="append").error_code == ErrorCode.LEDGER_WRITE_FAILED

    def test_duplicate_error_names_existing_order(self):
        error = DuplicateError("shop", "1001", host_order_name="#D7", host_order_id="gid://shopify/DraftOrder/7")

        assert "#D7" in error.message
        assert error.severity == ErrorSeverity.LOW
        assert error.is_retryable is False
        assert error.to_dict()["details"]["host_order_id"] == "gid://shopify/DraftOrder/7"

    def test_shopify_user_errors_are_not_retryable(self):
        error = ShopifyAPIException("rejected", user_errors=[{"field": ["email"], "message": "taken"}])
        assert error.is_retryable is False

    def test_rate_limit_code(self):
        error = ShopifyAPIException("slow down", api_response_code=429, rate_limited=True, retry_after=2)
        assert error.error_code == ErrorCode.RATE_LIMIT_EXCEEDED

    def test_str_includes_code(self):
        assert str(TransferFailure("boom")) == "SYNC_FAILED: boom"


class TestErrorAggregator:
    def test_splits_errors_and_warnings(self):
        aggregator = ErrorAggregator()
        aggregator.add_error(TransferFailure("host rejected"), {"order_number": "1"})
        aggregator.add_error(ConfigMissingError("shop"))
        aggregator.add_error(ValueError("unexpected"))

        summary = aggregator.get_summary()

        # TransferFailure is HIGH; ConfigMissing and converted errors are MEDIUM
        assert summary["error_count"] == 1
        assert summary["warning_count"] == 2
        assert summary["errors"][0]["details"]["order_number"] == "1"
        assert aggregator.has_errors()

    def test_clear(self):
        aggregator = ErrorAggregator()
        aggregator.add_error(TransferFailure("x"))
        aggregator.increment_processed()
        aggregator.clear()

        assert not aggregator.has_errors()
        assert aggregator.total_processed == 0
