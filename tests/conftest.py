"""
Pytest configuration and shared fixtures for the test suite.

This module provides:
- Automatic .env file loading for test configuration
- A fake LiveKitAPI whose SIP service records calls instead of sending them
- Custom pytest markers for test categorization
"""

import sys
from argparse import Namespace
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).parent.parent
env_file = project_root / ".env"
if env_file.exists():
    load_dotenv(env_file)

# Add src to Python path
sys.path.insert(0, str(project_root / "src"))


# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests that don't require external dependencies")
    config.addinivalue_line("markers", "integration: Integration tests that require a LiveKit server")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def project():
    """LiveKit project settings pointing at a local dev server."""
    from lksip.environment_config import LiveKitProject

    return LiveKitProject(url="ws://localhost:7880", api_key="devkey", api_secret="secret")


@pytest.fixture
def fake_lkapi():
    """A LiveKitAPI stand-in: every SIP service method is an AsyncMock."""
    lkapi = MagicMock()
    lkapi.aclose = AsyncMock()
    lkapi.sip = MagicMock()
    for method in [
        "list_inbound_trunk",
        "list_outbound_trunk",
        "list_dispatch_rule",
        "create_inbound_trunk",
        "create_outbound_trunk",
        "create_dispatch_rule",
        "delete_trunk",
        "delete_dispatch_rule",
        "update_inbound_trunk",
        "update_inbound_trunk_fields",
        "update_outbound_trunk",
        "update_outbound_trunk_fields",
        "update_dispatch_rule",
        "update_dispatch_rule_fields",
        "create_sip_participant",
        "transfer_sip_participant",
    ]:
        setattr(lkapi.sip, method, AsyncMock())
    return lkapi


def make_flags(**values):
    """Namespace as argparse would leave it: unset flags are None."""
    defaults = {
        "id": None,
        "name": None,
        "address": None,
        "transport": None,
        "numbers": None,
        "auth_user": None,
        "auth_pass": None,
        "trunks": None,
    }
    defaults.update(values)
    return Namespace(**defaults)


@pytest.fixture
def flags():
    return make_flags


def make_twirp_error(code, message, status=None, metadata=None):
    """A livekit.api.TwirpError instance independent of the SDK's constructor signature."""
    from livekit import api

    class StubTwirpError(api.TwirpError):
        def __init__(self):
            Exception.__init__(self, message)

        code = property(lambda self: code)
        message = property(lambda self: message)
        status = property(lambda self: status)
        metadata = property(lambda self: dict(metadata or {}))

    return StubTwirpError()


@pytest.fixture
def twirp_error():
    return make_twirp_error
