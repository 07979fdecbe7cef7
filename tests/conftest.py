import pytest

from helpers import FakeBackend
from orbit import BackendConfig


@pytest.fixture
def backend_config():
    return BackendConfig(url="https://orbit.example.supabase.co", anon_key="anon-key", timeout=5, feed_limit=20)


@pytest.fixture
def fake_backend():
    return FakeBackend()
