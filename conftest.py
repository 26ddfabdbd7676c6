"""
Repository-wide pytest setup: stable environment defaults for every test run.
"""
from __future__ import annotations

import os

import pytest

# Keep dict/set hash-iteration stable. (CI may override but local runs benefit.)
os.environ.setdefault("PYTHONHASHSEED", "0")
# Prefer UTC everywhere.
os.environ.setdefault("TZ", "UTC")
# Quiet, deterministic host defaults.
os.environ.setdefault("CUSTODY_LOG_LEVEL", "WARNING")
os.environ.setdefault("CUSTODY_CHAIN_ID", "1337")


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    """Each test sees load_config() rebuilt from its own environment."""
    from custody_vm.config import load_config

    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture(autouse=True)
def _restore_custody_loggers():
    """CLI runs configure custody_* loggers; hand them back to caplog."""
    import logging

    from custody_vm import logging as clog

    yield
    clog.clear_context()
    for name in ("custody_vm", "custody_contracts"):
        lg = logging.getLogger(name)
        for h in list(lg.handlers):
            lg.removeHandler(h)
        lg.propagate = True
        lg.setLevel(logging.NOTSET)
