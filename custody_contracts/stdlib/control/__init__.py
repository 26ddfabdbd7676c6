"""custody_contracts.stdlib.control — pause state helpers."""

from .packed_meta import PackedMeta

__all__ = ["PackedMeta"]
