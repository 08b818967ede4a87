import pytest

from quiz_api.repositories import get_store


@pytest.fixture(autouse=True)
def reset_store():
    """Start every test with an empty store and fresh id sequences."""
    get_store().clear()
    yield
    get_store().clear()
