"""
Test bootstrap:
- Make the tests/helpers package importable as ``helpers``
- Provide shared transport, token store and client fixtures
"""
import sys
import pathlib

import pytest

TESTS = pathlib.Path(__file__).parent.resolve()

if str(TESTS) not in sys.path:
    sys.path.insert(0, str(TESTS))

from helpers import MockTokenStore, MockTransport, mk_client  # noqa: E402


@pytest.fixture
def transport():
    """Mock transport with no routes."""
    return MockTransport()


@pytest.fixture
def token_store():
    """Token store that does not expire within the test."""
    return MockTokenStore()


@pytest.fixture
def client(transport, token_store):
    """Client wired to the mock transport and token store."""
    return mk_client(transport, token_store)
