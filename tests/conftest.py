import pathlib
import site

import pytest
from foundation.connection import dispose_all_engines
from foundation.session.base import _SESSION_REGISTRY

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_registries():
    """Restore the session registry and drop persistent engines around each test."""
    sessions = dict(_SESSION_REGISTRY)
    dispose_all_engines()
    yield
    dispose_all_engines()
    _SESSION_REGISTRY.clear()
    _SESSION_REGISTRY.update(sessions)


@pytest.fixture(autouse=True)
def fixed_timezone(monkeypatch):
    """Pin the process timezone so default configuration is predictable."""
    monkeypatch.setenv('TZ', 'US/Eastern')


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.values',
    'tests.fixtures.postgres',
]
