from prstate.derive import PrStateDeriver, derive_state_for_pr
from prstate.model import RawSnapshot, Result, result_adapter

__all__ = [
    "PrStateDeriver",
    "RawSnapshot",
    "Result",
    "derive_state_for_pr",
    "result_adapter",
]
