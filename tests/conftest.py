"""
Shared pytest fixtures for seqpipe tests.
"""

import pytest

from seqpipe.config import ConfigLoader, reset_settings
from seqpipe.dsl import Sequence


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """
    Isolate every test from the environment and any seqpipe.json.

    Settings are cached process-wide, so they are reset before and
    after each test.
    """
    for env_var in ConfigLoader.CONFIG_KEY_TO_ENV.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("SEQPIPE_DEBUG_LOG", raising=False)
    monkeypatch.setenv("SEQPIPE_PROJECT_ROOT", str(tmp_path))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def numbers():
    """The sequence [1, 2, 3, 4, 5]."""
    return Sequence.from_iterable([1, 2, 3, 4, 5])


@pytest.fixture
def empty():
    return Sequence.create(0)
