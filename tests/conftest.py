import logging
from typing import Dict

import pytest

from envbind import Loader, with_environ


@pytest.fixture()
def env() -> Dict[str, str]:
    """Isolated environment store; tests fill it instead of touching os.environ."""
    return {}


@pytest.fixture()
def make_loader(env):
    def _make(*options):
        return Loader(with_environ(env), *options)

    return _make


@pytest.fixture()
def loader_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="envbind")
    return caplog
