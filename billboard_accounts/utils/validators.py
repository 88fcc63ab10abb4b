# utils/validators.py
import math


def clean_text(text):
    """Stripped text, or None when blank."""
    if text is None:
        return None
    s = str(text).strip()
    return s or None


# ---- Numeric parsing ----

def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed (or the value is NaN/inf) and value is None.
    """
    if isinstance(x, bool):
        return False, None
    try:
        val = float(x)
    except (TypeError, ValueError):
        return False, None
    if math.isnan(val) or math.isinf(val):
        return False, None
    return True, val


def to_amount(x) -> float:
    """
    Money field coercion used for every source record: anything that does not
    parse to a finite number counts as 0.0.
    """
    ok, val = try_parse_float(x)
    return val if ok else 0.0


def to_optional_amount(x):
    """Like to_amount() but keeps a missing/unparseable value as None."""
    ok, val = try_parse_float(x)
    return val if ok else None
