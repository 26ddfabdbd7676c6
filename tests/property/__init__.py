# -*- coding: utf-8 -*-
"""
tests.property package bootstrap.

Hypothesis profiles and shared strategies for the ledger property tests.

On import:
- registers the dev/ci/fast/stress profiles;
- loads HYPOTHESIS_PROFILE if set, else "ci" when CI is truthy, else "dev";
- re-exports `given`, `settings` and `st`.

Usage:
    from tests.property import given, st, amounts

    @given(amounts())
    def test_something(n):
        ...
"""
from __future__ import annotations

import os
from typing import Final, Tuple

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st


def _hc(*items: HealthCheck) -> Tuple[HealthCheck, ...]:
    return items


# Ledger sequences build a fresh Host per example, so deadlines are off
# everywhere and too_slow is never fatal.
settings.register_profile(
    "dev",
    settings(
        max_examples=60,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.normal,
    ),
)

settings.register_profile(
    "ci",
    settings(
        max_examples=150,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow, HealthCheck.filter_too_much),
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)

settings.register_profile(
    "fast",
    settings(
        max_examples=20,
        deadline=None,
        suppress_health_check=_hc(HealthCheck.too_slow),
    ),
)

settings.register_profile(
    "stress",
    settings(
        max_examples=1000,
        deadline=None,
        suppress_health_check=_hc(
            HealthCheck.too_slow,
            HealthCheck.filter_too_much,
            HealthCheck.data_too_large,
        ),
        derandomize=True,
    ),
)


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)


def active_profile() -> str:
    return _active


# ---- shared strategies -------------------------------------------------------

PRINCIPALS: Final[Tuple[str, ...]] = ("owner", "alice", "bob", "carol")


def amounts(max_value: int = 10_000):
    """Small non-negative amounts; collisions with balances are what we want."""
    return st.integers(min_value=0, max_value=max_value)


def principals():
    return st.sampled_from(PRINCIPALS)


__all__ = [
    "st",
    "given",
    "settings",
    "active_profile",
    "amounts",
    "principals",
    "PRINCIPALS",
]
