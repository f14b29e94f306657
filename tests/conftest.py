import time

import pytest

# US Eastern as a POSIX rule, so no tz database is needed.
EASTERN_TZ = "EST5EDT,M3.2.0,M11.1.0"


@pytest.fixture
def eastern_time(monkeypatch):
    """Run the test with the process local time zone set to US Eastern."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", EASTERN_TZ)
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
