import pytest

from kite_runtime.config import _reset_config


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts without a cached kite.config."""
    _reset_config()
    yield
    _reset_config()
