"""Pytest configuration for esregexp tests."""

import pytest
import signal
import sys

from esregexp import RegExpSyntaxError, parse_literal


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "timeout(seconds): set custom timeout for test")


def timeout_handler(signum, frame):
    """Handle timeout signal."""
    pytest.fail("Test timed out")


@pytest.fixture(autouse=True)
def test_timeout(request):
    """Apply a timeout to all tests.

    Parsing is linear in the input, so a hang means a loop that does not
    advance the reader.  Default is 5 seconds; mark slow tests with
    @pytest.mark.timeout(30)
    """
    if sys.platform != "win32":
        marker = request.node.get_closest_marker("timeout")
        timeout_seconds = marker.args[0] if marker else 5

        old_handler = signal.signal(signal.SIGALRM, timeout_handler)
        signal.alarm(timeout_seconds)
        yield
        signal.alarm(0)
        signal.signal(signal.SIGALRM, old_handler)
    else:
        yield


@pytest.fixture
def literal_error():
    """Parse a literal that must fail and return the raised error."""
    def parse_error(source, **options):
        with pytest.raises(RegExpSyntaxError) as exc_info:
            parse_literal(source, **options)
        return exc_info.value
    return parse_error
