import inspect
import logging
import typing
from typing import Optional
from unittest.mock import Mock

import pytest

from softrefs.errors.handler import (
    ErrorHandler,
    ErrorOccurredEvent,
    ErrorSeverity,
    get_error_handler,
    set_error_handler,
)
from softrefs.events.bus import EventBus


def test_handle_error_logs_and_publishes():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    handler = ErrorHandler(logger, event_bus)

    error = ValueError("test error")
    handler.handle(error, ErrorSeverity.ERROR, {"listener": "WeakList"})

    logger.error.assert_called()
    assert logger.error.call_args.kwargs["extra"] == {"softrefs_context": {"listener": "WeakList"}}

    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.severity == ErrorSeverity.ERROR
    assert event.context == {"listener": "WeakList"}


def test_severity_selects_log_method():
    logger = Mock(spec=logging.Logger)
    handler = ErrorHandler(logger)

    handler.handle(RuntimeError("w"), ErrorSeverity.WARNING)

    logger.warning.assert_called()
    logger.error.assert_not_called()


def test_callback_for_errors_only():
    handler = ErrorHandler(Mock(spec=logging.Logger))
    callback = Mock()
    handler.register_callback(callback)

    handler.handle(RuntimeError("info"), ErrorSeverity.INFO)
    callback.assert_not_called()

    error = RuntimeError("critical")
    handler.handle(error, ErrorSeverity.CRITICAL)
    callback.assert_called_with(error, ErrorSeverity.CRITICAL)


def test_failing_callback_is_logged():
    logger = Mock(spec=logging.Logger)
    handler = ErrorHandler(logger)
    handler.register_callback(Mock(side_effect=RuntimeError("callback broke")))

    handler.handle(RuntimeError("original"), ErrorSeverity.ERROR)

    logger.exception.assert_called_with("Error callback failed")


def test_install_and_restore_handler():
    default = get_error_handler()
    custom = ErrorHandler(Mock(spec=logging.Logger))

    assert set_error_handler(custom) is None
    assert get_error_handler() is custom
    assert set_error_handler(None) is custom
    assert get_error_handler() is default


@pytest.mark.parametrize("owner", [ErrorHandler.__init__, EventBus.__init__])
def test_logger_parameter_is_optional(owner):
    assert typing.get_type_hints(owner)["logger"] == Optional[logging.Logger]
    assert inspect.signature(owner).parameters["logger"].default is None
