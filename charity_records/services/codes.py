# charity_records/services/codes.py
import math
import re
from typing import Iterable, Optional

BENEFICIARY_PREFIX = "B"
OPERATION_PREFIX = "OP"


def code_number(code, prefix: str) -> Optional[int]:
    """Numeric suffix of a well-formed code, None otherwise."""
    if not isinstance(code, str):
        return None
    match = re.fullmatch(re.escape(prefix) + r"([0-9]+)", code)
    return int(match.group(1)) if match else None


def is_valid_code(code, prefix: str) -> bool:
    return code_number(code, prefix) is not None


def format_code(number: int, prefix: str) -> str:
    return f"{prefix}{number:03d}"


def max_code_number(codes: Iterable, prefix: str) -> int:
    """Largest suffix among valid codes; malformed codes count as 0."""
    return max((code_number(c, prefix) or 0 for c in codes), default=0)


def next_code(codes: Iterable, prefix: str) -> str:
    """
    Next sequential code: prefix + zero-padded (max suffix + 1).
    Freed numbers are never reused.
    Example: ["B001", "B007", "X12"] -> "B008"
    """
    return format_code(max_code_number(codes, prefix) + 1, prefix)


def is_valid_id(value) -> bool:
    """Usable numeric id: an integral, finite number (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value) or not value.is_integer()):
        return False
    return True


def next_id(ids: Iterable) -> int:
    """max(valid ids) + 1, starting at 1."""
    return max((int(i) for i in ids if is_valid_id(i)), default=0) + 1
