import os
import sys
import asyncio
import inspect

import httpx
import pytest

# Ensure project root is on sys.path so `import flight_gateway` works in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from flight_gateway.amadeus.client import AmadeusClient  # noqa: E402
from flight_gateway.config import Settings  # noqa: E402
from flight_gateway.obs.audit import AuditLogger  # noqa: E402


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


@pytest.fixture
def gateway_settings(tmp_path):
    return Settings(
        AMADEUS_CLIENT_ID="client-id",
        AMADEUS_CLIENT_SECRET="client-secret",
        AMADEUS_ENV="sandbox",
        AUDIT_LOG_ENABLED=False,
        AUDIT_LOG_DIR=str(tmp_path / "audit"),
        _env_file=None,
    )


@pytest.fixture
def make_client(gateway_settings):
    """Build an AmadeusClient whose HTTP traffic goes to ``handler``."""
    def _make(handler, audit=None):
        return AmadeusClient(
            settings=gateway_settings,
            transport=httpx.MockTransport(handler),
            audit=audit or AuditLogger(gateway_settings.AUDIT_LOG_DIR, enabled=False),
        )
    return _make
