"""
custody_contracts.tools — drivers that exercise the contracts end to end.

- ``compare`` : storage-access comparison of the two token layouts
- ``replay``  : run a JSON operation script against both layouts
- ``demo``    : deposit/withdraw walk-through for a DepositPool
"""
