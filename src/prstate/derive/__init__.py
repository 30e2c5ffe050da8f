from prstate.derive.deriver import PrStateDeriver, derive_state_for_pr, describe_result
from prstate.derive.owners import HeaderParseError, parse_header_or_fail

__all__ = [
    "PrStateDeriver",
    "derive_state_for_pr",
    "describe_result",
    "HeaderParseError",
    "parse_header_or_fail",
]
