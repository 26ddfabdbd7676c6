# -*- coding: utf-8 -*-
"""
Property tests for the host journal.

- begin → writes → revert  ⇒ state equals baseline
- begin → writes → commit  ⇒ state equals baseline ∪ writes (last-wins)
- nested checkpoints behave as a stack (inner revert keeps outer writes)
- Host.atomic: an exception anywhere in a call leaves no trace
"""
from __future__ import annotations

from typing import Dict

import pytest

from custody_vm.runtime import Host, Journal

from . import given, st

ADDR = st.binary(min_size=20, max_size=20)
HKEY = st.binary(min_size=1, max_size=32)
HVAL = st.binary(min_size=1, max_size=64)
WRITES = st.dictionaries(keys=st.tuples(ADDR, HKEY), values=HVAL, max_size=12)


def _load(j: Journal, writes: Dict) -> None:
    for (addr, key), value in writes.items():
        j.set(addr, key, value)


def _expected(*layers: Dict) -> Dict[bytes, Dict[bytes, bytes]]:
    out: Dict[bytes, Dict[bytes, bytes]] = {}
    for layer in layers:
        for (addr, key), value in layer.items():
            out.setdefault(addr, {})[key] = value
    return out


@given(WRITES, WRITES)
def test_revert_restores_baseline(base, writes):
    j = Journal()
    _load(j, base)
    baseline = j.snapshot()
    j.begin()
    _load(j, writes)
    j.revert()
    assert j.snapshot() == baseline
    assert j.depth() == 0


@given(WRITES, WRITES)
def test_commit_is_last_wins_merge(base, writes):
    j = Journal()
    _load(j, base)
    j.begin()
    _load(j, writes)
    j.commit()
    assert j.snapshot() == _expected(base, writes)


@given(WRITES, WRITES, WRITES)
def test_nested_checkpoints_stack(base, outer, inner):
    j = Journal()
    _load(j, base)
    j.begin()
    _load(j, outer)
    j.begin()
    _load(j, inner)
    j.revert()
    assert j.snapshot() == _expected(base, outer)
    j.commit()
    assert j.snapshot() == _expected(base, outer)


@given(WRITES, st.integers(min_value=0, max_value=3))
def test_atomic_failure_leaves_no_trace(writes, depth):
    host = Host()
    before = host.journal.snapshot()

    def nested(level: int) -> None:
        with host.atomic(f"level-{level}"):
            _load(host.journal, writes)
            if level < depth:
                nested(level + 1)
            else:
                raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        nested(0)
    assert host.journal.snapshot() == before
    assert host.journal.depth() == 0
