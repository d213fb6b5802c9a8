from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


def to_int(v) -> Optional[int]:
    try:
        if v is None or v == "" or str(v).lower() == "null":
            return None
        return int(float(v))
    except (TypeError, ValueError):
        return None


def to_float(v) -> Optional[float]:
    try:
        if v is None or v == "" or str(v).lower() == "null":
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def to_str(v) -> str:
    return "" if v is None else str(v)


def to_bool(v) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return False
    return str(v).strip().lower() in _TRUTHY
