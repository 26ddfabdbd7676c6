"""
custody_contracts.stdlib — helpers shared by the ledger contracts.

- ``math``    : u256 envelope, checked and explicitly unchecked arithmetic
- ``token``   : storage prefixes, event names, amount validation
- ``control`` : pause/last-update word codec
"""
