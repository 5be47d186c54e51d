import pytest


@pytest.fixture
def settings():
    from radclean.config import Settings

    return Settings(_env_file=None)


@pytest.fixture
def brain_store():
    from radclean.modules import get_module

    return get_module("brain").new_store()


@pytest.fixture
def pancreas_store():
    from radclean.modules import get_module

    return get_module("pancreas").new_store()
