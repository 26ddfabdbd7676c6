# -*- coding: utf-8 -*-
"""
custody_contracts.tests.conftest
================================

Fixtures shared by the contract tests.

- ``host``           : fresh Host (20-byte addresses, genesis ts 1_700_000_000)
- ``accounts``       : stable principals derived from tags (owner, alice, bob, carol)
- ``token``          : one token per layout (parametrized: standard, packed)
- ``token_pair``     : both layouts on separate hosts, for side-by-side checks
- ``funded_pool``    : DepositPool over a StandardToken with alice/bob funded
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import pytest

from custody_contracts.pool import DepositPool, TokenAsset
from custody_contracts.token import VARIANTS, PackedToken, StandardToken, TokenBase
from custody_vm.config import LedgerConfig
from custody_vm.runtime import Host

GENESIS_TS = 1_700_000_000
MAX_SUPPLY = 1_000_000
FUNDING = 1_000

_CONFIG = LedgerConfig(
    address_len=20,
    chain_id=1337,
    genesis_timestamp=GENESIS_TS,
    max_storage_key_bytes=160,
    max_storage_value_bytes=131_072,
    max_events_per_call=1024,
    log_level="WARNING",
    log_format=None,
)


def new_host() -> Host:
    return Host(_CONFIG)


@dataclass(frozen=True)
class Accounts:
    owner: bytes
    alice: bytes
    bob: bytes
    carol: bytes

    def all(self) -> Tuple[bytes, ...]:
        return (self.owner, self.alice, self.bob, self.carol)


def accounts_for(host: Host) -> Accounts:
    return Accounts(*(host.address(tag) for tag in ("owner", "alice", "bob", "carol")))


def deploy_token(host: Host, variant, **kwargs) -> TokenBase:
    kwargs.setdefault("owner", host.address("owner"))
    kwargs.setdefault("max_supply", MAX_SUPPLY)
    return host.deploy(variant, **kwargs)


@pytest.fixture
def host() -> Host:
    return new_host()


@pytest.fixture
def accounts(host: Host) -> Accounts:
    return accounts_for(host)


@pytest.fixture(params=sorted(VARIANTS), ids=sorted(VARIANTS))
def token(request, host: Host) -> TokenBase:
    return deploy_token(host, VARIANTS[request.param])


@pytest.fixture
def token_pair() -> Dict[str, TokenBase]:
    return {
        "standard": deploy_token(new_host(), StandardToken),
        "packed": deploy_token(new_host(), PackedToken),
    }


@dataclass
class PoolSetup:
    host: Host
    token: TokenBase
    pool: DepositPool
    accounts: Accounts

    def approve_and_deposit(self, who: bytes, amount: int) -> None:
        self.token.approve(who, self.pool.address, amount)
        self.pool.deposit(who, amount)


@pytest.fixture
def funded_pool(host: Host, accounts: Accounts) -> PoolSetup:
    token = deploy_token(host, StandardToken)
    token.mint(accounts.owner, accounts.alice, FUNDING)
    token.mint(accounts.owner, accounts.bob, FUNDING)
    pool = host.deploy(DepositPool, asset=TokenAsset(token))
    return PoolSetup(host=host, token=token, pool=pool, accounts=accounts)
