# utils/helpers.py
from datetime import date, datetime, timezone
import logging
from typing import Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "—"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except (TypeError, ValueError) as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_amount(v: NumberLike) -> str:
    """
    Compact amount used inside descriptions/details: thousands separators and
    at most three decimals, trailing zeros dropped (5000 -> '5,000', 12.5 -> '12.5').
    """
    try:
        x = float(v)
    except (TypeError, ValueError):
        return str(v)
    text = f"{x:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def parse_timestamp(value) -> Optional[datetime]:
    """
    Parse an ISO date/datetime (str, date or datetime) into an aware datetime.

    Naive values are taken as UTC. Returns None when the value is missing or
    cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            # 'YYYY-MM-DD HH:MM:SS.ffffff+00' style values from older exports
            try:
                dt = datetime.fromisoformat(text[:19])
            except ValueError:
                _log.debug("parse_timestamp: unparseable date %r", value)
                return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def timestamp_key(value) -> float:
    """Sort key for dates: epoch seconds, 0.0 for missing/unparseable values."""
    dt = parse_timestamp(value)
    return dt.timestamp() if dt is not None else 0.0


def date_only(value) -> str:
    """'YYYY-MM-DD' for display, '' when missing/unparseable."""
    dt = parse_timestamp(value)
    return dt.date().isoformat() if dt is not None else ""
