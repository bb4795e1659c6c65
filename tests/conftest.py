"""Shared pytest configuration and fixtures for the gps_stream test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a physical GPS receiver"
    )
    config.addinivalue_line(
        "markers", "asyncio: mark test as async"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require a physical GPS receiver",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Sample sentences (checksums verified)
# =============================================================================

GGA_SENTENCE = "$GPGGA,123519,4807.038,N,01131.000,E,1,08,0.9,545.4,M,46.9,M,,*47"
GGA_SOUTH_WEST = "$GPGGA,123519,4807.038,S,01131.000,W,1,08,0.9,545.4,M,47.0,M,,*40"
GGA_NO_FIX = "$GPGGA,,,,,,0,00,99.99,,,,,,*48"
GGA_DGPS = "$GPGGA,123519.50,4807.038,N,01131.000,E,2,12,0.9,-12.5,M,-47.0,M,3.2,0120*76"
RMC_SENTENCE = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"
RMC_WITH_MODE = "$GPRMC,123519,A,3348.456,S,15101.123,W,0.0,0.0,010120,,,A*7F"
RMC_VOID = "$GPRMC,123519,V,,,,,,,230394,,,N*51"
VTG_SENTENCE = "$GPVTG,054.7,T,034.4,M,005.5,N,010.2,K*48"
VTG_WITH_MODE = "$GPVTG,054.7,T,034.4,M,005.5,N,010.2,K,A*25"
ZDA_SENTENCE = "$GPZDA,201530.00,04,07,2002,00,00*60"
ZDA_NEGATIVE_ZONE = "$GPZDA,050306,29,02,2024,-05,30*6E"
GSV_SENTENCE = "$GPGSV,3,1,11,03,03,111,00,04,15,270,00,06,01,010,00,13,06,292,00*74"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_stream() -> bytes:
    """One burst of every supported sentence, CRLF-terminated."""
    return "".join(
        f"{s}\r\n" for s in (GGA_SENTENCE, RMC_SENTENCE, VTG_SENTENCE, ZDA_SENTENCE)
    ).encode("ascii")
