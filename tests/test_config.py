import sys

import pytest
from loguru import logger

from phongtrace.config import RenderConfig, configure_logging, NUM_THREADS


def test_defaults():
    config = RenderConfig()
    assert config.num_workers == NUM_THREADS
    assert config.channels == 4
    assert config.background == (0, 0, 0)


@pytest.mark.parametrize("kwargs", [
    {"num_workers": 0},
    {"rows_per_chunk": 0},
    {"channels": 2},
    {"background": (0, 0)},
])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        RenderConfig(**kwargs)


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.mark.parametrize("env, shown", [(None, False), ("debug", True), ("ERROR", False)])
def test_log_level_from_environment(monkeypatch, capsys, restore_logger, env, shown):
    if env is None:
        monkeypatch.delenv("LOG", raising=False)
    else:
        monkeypatch.setenv("LOG", env)
    configure_logging()
    logger.debug("debug message")
    assert ("debug message" in capsys.readouterr().err) == shown
