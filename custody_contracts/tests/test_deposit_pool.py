from __future__ import annotations

from types import SimpleNamespace
from typing import List, Optional

import pytest

from custody_contracts.pool import DepositPool, TokenAsset
from custody_contracts.pool.deposit_pool import EVT_DEPOSITED, EVT_WITHDRAWN
from custody_vm.errors import (InsufficientBalance, InvalidAddress,
                               InvalidAmount, InvalidConfiguration,
                               TransferFailed)

from .conftest import FUNDING


def _pool_state(s):
    return s.host.journal.snapshot(), s.host.events.events()


# ---------------------------------------------------------------------------
# Deployment
# ---------------------------------------------------------------------------


def test_initial_state(funded_pool):
    p = funded_pool.pool
    assert p.total_deposited() == 0
    assert p.balance_of(funded_pool.accounts.alice) == 0
    assert p.token_address() == funded_pool.token.address
    assert p.token_address() == p.asset.token_address


@pytest.mark.parametrize(
    "asset",
    [None, object(), TokenAsset(SimpleNamespace(address=b"\x00" * 20))],
    ids=["none", "not-an-asset", "zero-token"],
)
def test_bad_asset_rejected(host, asset):
    with pytest.raises(InvalidConfiguration):
        host.deploy(DepositPool, asset=asset)
    assert host.journal.snapshot() == {}


def test_token_asset_requires_token():
    with pytest.raises(InvalidConfiguration):
        TokenAsset(None)


def test_asset_binds_to_a_single_pool(funded_pool):
    with pytest.raises(InvalidConfiguration):
        funded_pool.host.deploy(DepositPool, asset=funded_pool.pool.asset)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


def test_deposit_then_partial_withdraw(funded_pool):
    s, a = funded_pool, funded_pool.accounts
    s.approve_and_deposit(a.alice, 100)
    assert s.pool.balance_of(a.alice) == 100
    assert s.pool.total_deposited() == 100
    assert s.token.balance_of(s.pool.address) == 100
    assert s.token.balance_of(a.alice) == FUNDING - 100

    s.pool.withdraw(a.alice, 50)
    assert s.pool.balance_of(a.alice) == 50
    assert s.pool.total_deposited() == 50
    assert s.token.balance_of(a.alice) == FUNDING - 50

    evs = s.pool.events()
    assert [e.name for e in evs] == [EVT_DEPOSITED, EVT_WITHDRAWN]
    assert evs[0].args == {"principal": a.alice, "amount": 100, "new_total": 100}
    assert evs[1].args == {"principal": a.alice, "amount": 50, "new_total": 50}


def test_two_depositors_and_full_withdrawal(funded_pool):
    s, a = funded_pool, funded_pool.accounts
    s.approve_and_deposit(a.alice, 100)
    s.approve_and_deposit(a.bob, 200)
    assert s.pool.total_deposited() == 300

    s.pool.withdraw(a.alice, 100)
    assert s.pool.total_deposited() == 200
    assert s.pool.balance_of(a.alice) == 0
    assert s.token.balance_of(a.alice) == FUNDING
    # a zeroed balance leaves no storage entry behind
    pool_state = s.pool.host.journal.snapshot(s.pool.address).get(s.pool.address, {})
    assert not any(k.endswith(a.alice) for k in pool_state)


def test_multiple_deposits_accumulate(funded_pool):
    s, a = funded_pool, funded_pool.accounts
    s.token.approve(a.alice, s.pool.address, 200)
    s.pool.deposit(a.alice, 100)
    s.pool.deposit(a.alice, 50)
    assert s.pool.balance_of(a.alice) == 150
    assert s.token.allowance(a.alice, s.pool.address) == 50


def test_zero_amounts_and_overdraw_leave_state_unchanged(funded_pool):
    s, a = funded_pool, funded_pool.accounts
    s.approve_and_deposit(a.alice, 100)
    before = _pool_state(s)

    with pytest.raises(InvalidAmount):
        s.pool.deposit(a.alice, 0)
    with pytest.raises(InvalidAmount):
        s.pool.withdraw(a.alice, 0)
    with pytest.raises(InsufficientBalance) as ei:
        s.pool.withdraw(a.alice, 150)
    assert ei.value.data["balance"] == 100

    assert _pool_state(s) == before


@pytest.mark.parametrize("amount", [-1, 1 << 256, "10", 1.5])
def test_out_of_domain_amount(funded_pool, amount):
    with pytest.raises(InvalidAmount):
        funded_pool.pool.deposit(funded_pool.accounts.alice, amount)


def test_deposit_without_allowance_fails_atomically(funded_pool):
    s, a = funded_pool, funded_pool.accounts
    before = _pool_state(s)
    with pytest.raises(TransferFailed) as ei:
        s.pool.deposit(a.alice, 10)
    assert ei.value.__cause__ is not None
    assert ei.value.__cause__.code == "INSUFFICIENT_ALLOWANCE"
    assert _pool_state(s) == before


def test_deposit_beyond_external_balance_fails(funded_pool):
    s, a = funded_pool, funded_pool.accounts
    s.token.approve(a.alice, s.pool.address, 2 * FUNDING)
    before = _pool_state(s)
    with pytest.raises(TransferFailed):
        s.pool.deposit(a.alice, 2 * FUNDING)
    assert _pool_state(s) == before


# ---------------------------------------------------------------------------
# Boundary failures & reentrancy (hand-written assets)
# ---------------------------------------------------------------------------


class LedgerAsset:
    """In-memory asset; `pull`/`push` outcomes can be scripted."""

    def __init__(self) -> None:
        self.pulled: List[tuple] = []
        self.pushed: List[tuple] = []
        self.push_result: Optional[bool] = True
        self.push_error: Optional[Exception] = None

    def pull(self, owner: bytes, amount: int) -> bool:
        self.pulled.append((owner, amount))
        return True

    def push(self, to: bytes, amount: int) -> Optional[bool]:
        if self.push_error is not None:
            raise self.push_error
        self.pushed.append((to, amount))
        return self.push_result


@pytest.fixture
def plain_pool(host):
    asset = LedgerAsset()
    return host.deploy(DepositPool, asset=asset), asset


@pytest.mark.parametrize("mode", ["false", "raise"])
def test_failed_push_rolls_back_debit(host, accounts, plain_pool, mode):
    pool, asset = plain_pool
    pool.deposit(accounts.alice, 100)
    before = host.journal.snapshot(), host.events.events()

    if mode == "false":
        asset.push_result = False
    else:
        asset.push_error = RuntimeError("asset offline")
    with pytest.raises(TransferFailed) as ei:
        pool.withdraw(accounts.alice, 40)
    assert ei.value.data["op"] == "push"

    assert (host.journal.snapshot(), host.events.events()) == before
    assert pool.balance_of(accounts.alice) == 100


def test_token_address_is_zero_for_assets_without_a_token(host, plain_pool):
    pool, _ = plain_pool
    assert pool.token_address() == host.zero_address


@pytest.mark.parametrize("principal", ["alice", None, b"\x01" * 19, 7])
def test_balance_of_rejects_malformed_principal(plain_pool, principal):
    pool, _ = plain_pool
    with pytest.raises(InvalidAddress) as ei:
        pool.balance_of(principal)
    assert ei.value.data["field"] == "principal"


def test_none_from_asset_counts_as_success(host, accounts):
    class Silent(LedgerAsset):
        def pull(self, owner, amount):
            return None

    pool = host.deploy(DepositPool, asset=Silent())
    pool.deposit(accounts.alice, 7)
    assert pool.total_deposited() == 7


def test_reentrant_withdraw_sees_debited_balance(host, accounts):
    class Reentrant(LedgerAsset):
        pool: DepositPool
        reentry_error: Optional[Exception] = None

        def push(self, to, amount):
            if not self.pushed:
                self.pushed.append((to, amount))
                try:
                    self.pool.withdraw(to, amount)
                except InsufficientBalance as e:
                    self.reentry_error = e
            return True

    asset = Reentrant()
    pool = host.deploy(DepositPool, asset=asset)
    asset.pool = pool
    pool.deposit(accounts.alice, 100)

    pool.withdraw(accounts.alice, 100)

    assert isinstance(asset.reentry_error, InsufficientBalance)
    assert asset.pushed == [(accounts.alice, 100)]
    assert pool.balance_of(accounts.alice) == 0
    assert pool.total_deposited() == 0


def test_reentrant_deposit_during_pull_is_not_clobbered(host, accounts):
    class Reentrant(LedgerAsset):
        pool: DepositPool

        def pull(self, owner, amount):
            first = not self.pulled
            self.pulled.append((owner, amount))
            if first:
                self.pool.deposit(accounts.bob, 5)
            return True

    asset = Reentrant()
    pool = host.deploy(DepositPool, asset=asset)
    asset.pool = pool

    pool.deposit(accounts.alice, 10)

    assert pool.balance_of(accounts.alice) == 10
    assert pool.balance_of(accounts.bob) == 5
    assert pool.total_deposited() == 15
    totals = [e.args["new_total"] for e in pool.events(EVT_DEPOSITED)]
    assert totals == [5, 15]


def test_failure_is_logged(host, accounts, plain_pool, caplog):
    pool, asset = plain_pool
    pool.deposit(accounts.alice, 1)
    asset.push_result = False
    caplog.set_level("WARNING", logger="custody_contracts")
    with pytest.raises(TransferFailed):
        pool.withdraw(accounts.alice, 1)
    assert any("asset push returned False" in r.getMessage() for r in caplog.records)
