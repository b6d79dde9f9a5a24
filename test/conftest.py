import pytest

from shadowmatic import GlobalShadowRegistry, ShadowRegistry


@pytest.fixture(autouse=True)
def cleanup_after_test():
    # Setup: runs before each test
    GlobalShadowRegistry().clear()
    yield
    GlobalShadowRegistry().clear()


@pytest.fixture
def registry() -> ShadowRegistry:
    return ShadowRegistry()
