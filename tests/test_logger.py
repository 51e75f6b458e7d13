from logging.handlers import TimedRotatingFileHandler

from tracker.utils.logger import setup_logger


def test_module_loggers_share_handlers():
    first = setup_logger("tracker.tests.first")
    second = setup_logger("tracker.tests.second")

    assert first.handlers == second.handlers
    assert any(isinstance(h, TimedRotatingFileHandler) for h in first.handlers)
    assert setup_logger("tracker.tests.first").handlers == first.handlers
