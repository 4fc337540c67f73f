"""
Tests for the error handling system.

Covers the exception hierarchy, centralized error handling with both stdlib
and structured loggers, and safe execution.
"""

import pytest
import logging
from unittest.mock import Mock
from roster_scanner.utils.error_handler import (
    RosterScannerError,
    ConfigurationError,
    DecodeError,
    TemplateUnavailableError,
    TextRecognitionUnavailableError,
    ErrorContext,
    handle_error,
    safe_execute,
)


@pytest.fixture
def context():
    return ErrorContext(
        operation="template load",
        module="reference.library",
        function="build_library",
        input_data={"character_id": "batman"},
    )


class TestRosterScannerError:
    """Test the base exception class and its subclasses."""

    def test_base_exception_creation(self):
        error = RosterScannerError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}

    def test_exception_with_details(self):
        error = RosterScannerError("Test error", {"field": "value", "code": 123})
        assert str(error) == "Test error | Details: {'field': 'value', 'code': 123}"
        assert error.details == {"field": "value", "code": 123}
        assert error.describe() == str(error)

    def test_exception_inheritance(self):
        for exc_class in (ConfigurationError, DecodeError, TemplateUnavailableError, TextRecognitionUnavailableError):
            assert issubclass(exc_class, RosterScannerError)
            error = exc_class("boom")
            assert error.message == "boom"


class TestHandleError:
    """Test the centralized error handling function."""

    def test_handle_error_reraises_by_default(self, context):
        error = TemplateUnavailableError("Template request for batman returned 404", {"status": 404})
        logger = Mock(spec=logging.Logger)

        with pytest.raises(TemplateUnavailableError) as exc_info:
            handle_error(error, context, logger)

        assert exc_info.value is error
        logger.error.assert_called_once()
        message = logger.error.call_args[0][0]
        assert "reference.library.build_library" in message
        assert "returned 404" in message
        assert "'status': 404" in message

    def test_handle_error_stdlib_logger_uses_extra(self, context):
        logger = Mock(spec=logging.Logger)

        handle_error(DecodeError("Could not decode image"), context, logger, reraise=False)

        extra = logger.error.call_args[1]['extra']
        assert extra['error_type'] == "DecodeError"
        assert extra['operation'] == "template load"
        assert extra['error_module'] == "reference.library"
        assert extra['error_function'] == "build_library"
        assert extra['input_data'] == {"character_id": "batman"}

    def test_handle_error_structured_logger_uses_kwargs(self, context):
        logger = Mock()

        result = handle_error(
            DecodeError("Could not decode image"), context, logger, reraise=False, default_return=("batman", None)
        )

        assert result == ("batman", None)
        kwargs = logger.error.call_args[1]
        assert kwargs['error_type'] == "DecodeError"
        assert kwargs['input_data'] == {"character_id": "batman"}
        assert 'extra' not in kwargs

    def test_handle_error_with_standard_exception(self, context):
        logger = Mock(spec=logging.Logger)

        with pytest.raises(ValueError):
            handle_error(ValueError("Invalid value"), context, logger)

        assert "Invalid value" in logger.error.call_args[0][0]


class TestSafeExecute:
    """Test the safe execution utility function."""

    def test_safe_execute_success(self, context):
        logger = Mock(spec=logging.Logger)

        result = safe_execute(lambda x, y: x + y, 2, 3, context=context, logger=logger)

        assert result == 5
        assert not logger.error.called

    def test_safe_execute_absorbs_scanner_errors(self, context):
        logger = Mock(spec=logging.Logger)

        def failing():
            raise TemplateUnavailableError("missing")

        result = safe_execute(failing, context=context, logger=logger, default_return="fallback")

        assert result == "fallback"
        logger.error.assert_called_once()

    def test_safe_execute_propagates_programming_errors(self, context):
        logger = Mock(spec=logging.Logger)

        def failing():
            raise KeyError("oops")

        with pytest.raises(KeyError):
            safe_execute(failing, context=context, logger=logger)

    def test_safe_execute_with_args_kwargs(self, context):
        logger = Mock(spec=logging.Logger)

        def describe(name, rank=1, **kwargs):
            return f"{name} rank {rank} with {len(kwargs)} extra args"

        result = safe_execute(describe, "Batman", rank=10, badge=30, context=context, logger=logger)

        assert result == "Batman rank 10 with 1 extra args"
