from __future__ import annotations

import pytest

from custody_vm.errors import VmError
from custody_vm.runtime import AccessStats, Journal, Storage
from custody_vm.runtime.storage_api import U256_MAX

ADDR = b"\xaa" * 20


@pytest.fixture
def stats() -> AccessStats:
    return AccessStats()


@pytest.fixture
def storage(stats: AccessStats) -> Storage:
    return Storage(Journal(), ADDR, stats, max_key_bytes=16, max_value_bytes=64)


def test_int_roundtrip_and_zero_is_absent(storage: Storage):
    assert storage.get_int(b"bal") == 0
    storage.set_int(b"bal", 42)
    assert storage.get(b"bal") == (42).to_bytes(32, "big")
    assert storage.get_int(b"bal") == 42
    storage.set_int(b"bal", 0)
    assert storage.get(b"bal") is None
    assert not storage.exists(b"bal")


def test_set_int_bounds(storage: Storage):
    storage.set_int(b"max", U256_MAX)
    assert storage.get_int(b"max") == U256_MAX
    for bad in (-1, U256_MAX + 1, True, "1"):
        with pytest.raises(VmError) as ei:
            storage.set_int(b"x", bad)  # type: ignore[arg-type]
        assert ei.value.code == "storage_invalid"


def test_key_and_value_caps(storage: Storage):
    with pytest.raises(VmError):
        storage.set(b"", b"v")
    with pytest.raises(VmError):
        storage.set(b"k" * 17, b"v")
    with pytest.raises(VmError):
        storage.set(b"k", b"v" * 65)
    with pytest.raises(VmError):
        storage.get("k")  # type: ignore[arg-type]


def test_access_counting(storage: Storage, stats: AccessStats):
    storage.get(b"a")
    storage.set(b"a", b"1")
    storage.set_int(b"b", 0)  # delete counts as a write
    storage.exists(b"a")
    c = stats.for_address(ADDR)
    assert (c.reads, c.writes, c.total) == (2, 2, 4)
    assert c.touched == {b"a", b"b"}

    stats.reset(ADDR)
    assert stats.for_address(ADDR).total == 0


def test_counts_are_copies(storage: Storage, stats: AccessStats):
    storage.get(b"a")
    snap = stats.for_address(ADDR)
    snap.reads = 99
    snap.touched.add(b"z")
    assert stats.for_address(ADDR).reads == 1
    assert stats.for_address(ADDR).touched == {b"a"}
