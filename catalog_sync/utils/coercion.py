"""Value coercion helpers for raw supplier payloads.

Every helper here is total: bad input becomes ``None`` instead of raising,
so normalization of a record can never fail.
"""

import json
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Tuple

ELLIPSIS = "..."

_LEADING_NUMBER = re.compile(r"^[-+]?(?:\d+(?:[.,]\d*)?|[.,]\d+)(?:[eE][-+]?\d+)?")
_FRACTION = re.compile(r"(\.\d{6})\d+")
_URL_SEPARATORS = re.compile(r"[,;|\s]+")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%d-%m-%Y",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%d.%m.%Y",
    "%Y%m%d",
)

_TRUE_VALUES = {"true", "yes", "y", "1", "on"}
_FALSE_VALUES = {"false", "no", "n", "0", "off"}


def is_blank(value: Any) -> bool:
    """True for None and for strings holding only whitespace."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def first_present(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """
    Return the first non-null, non-empty value among alternate key spellings.

    Args:
        raw: Raw supplier record
        keys: Candidate keys in priority order

    Returns:
        The first usable value, or None
    """
    if not isinstance(raw, Mapping):
        return None
    for key in keys:
        value = raw.get(key)
        if not is_blank(value):
            return value
    return None


def truncate(text: str, max_length: int, marker: str = ELLIPSIS) -> str:
    """Cut text to max_length characters, ending with the marker when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(marker)] + marker


def clean_string(value: Any, max_length: Optional[int] = None) -> Optional[str]:
    """
    Trim a scalar to a string; empty becomes None.

    Args:
        value: Raw value (string or other scalar)
        max_length: Fixed width of the destination column, if any

    Returns:
        Sanitized string or None
    """
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    if isinstance(value, bool):
        text = "yes" if value else "no"
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        text = str(int(value)) if value.is_integer() else str(value)
    else:
        text = str(value)
    text = text.strip()
    if not text:
        return None
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]
    return text


def _as_float(value: Any) -> Optional[float]:
    """Convert an int or float, None when it does not fit a float."""
    try:
        number = float(value)
    except OverflowError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_float(value: Any) -> Optional[float]:
    """
    Parse a number from a number or a numeric string.

    Like a lenient ``parseFloat``, a string's leading number is used
    ("12.5 cm" gives 12.5) and a decimal comma is accepted. Anything else
    gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _as_float(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value.strip())
        if not match:
            return None
        try:
            return _as_float(match.group(0).replace(",", "."))
        except ValueError:
            return None
    return None


def to_int(value: Any) -> Optional[int]:
    """Parse a number and round half up to an integer."""
    number = to_float(value)
    if number is None:
        return None
    return int(math.floor(number + 0.5))


def to_bool(value: Any) -> Optional[bool]:
    """Interpret booleans, 0/1 and yes/no style strings; otherwise None."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(value)
        return None
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
    return None


def _naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Parse any common date representation into a naive UTC datetime.

    Accepts datetimes, dates, epoch seconds or milliseconds, ISO 8601
    strings (with "Z", offsets and up to 7 fractional digits) and a few
    day/month layouts. Unparseable input gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        number = _as_float(value)
        if number is None:
            return None
        seconds = number / 1000.0 if abs(number) > 1e11 else number
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    iso = _FRACTION.sub(r"\1", text)
    if iso.endswith("Z") or iso.endswith("z"):
        iso = iso[:-1] + "+00:00"
    try:
        return _naive_utc(datetime.fromisoformat(iso))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def serialize_raw(raw: Any, max_bytes: int) -> Tuple[str, bool]:
    """
    Serialize a raw record for storage, capped at max_bytes of UTF-8.

    A payload over the cap is stored as ``{"truncated": true, "head": ...}``
    where ``head`` is the start of the serialized record, so the stored text
    is always valid JSON. A cap too small for the wrapper itself yields the
    wrapper with an empty head.

    Returns:
        Tuple of (serialized text, whether it was cut)
    """
    text = json.dumps(raw, ensure_ascii=False, default=str)
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text, False

    budget = max_bytes
    while True:
        head = encoded[: max(budget, 0)].decode("utf-8", errors="ignore")
        wrapped = json.dumps({"truncated": True, "head": head}, ensure_ascii=False)
        excess = len(wrapped.encode("utf-8")) - max_bytes
        if excess <= 0 or not head:
            return wrapped, True
        budget -= excess


def split_urls(value: Any) -> List[str]:
    """Split a delimited URL list ("a.jpg, b.jpg|c.jpg") into URLs."""
    if isinstance(value, (list, tuple)):
        parts = [clean_string(item) for item in value]
    elif isinstance(value, str):
        parts = [part.strip() for part in _URL_SEPARATORS.split(value)]
    else:
        return []
    return [part for part in parts if part]
