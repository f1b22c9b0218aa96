import re
from datetime import datetime, timedelta, timezone
from typing import Optional

_FRACTION = re.compile(r"\.(\d+)")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def iso_to_epoch_ms(value: Optional[str]) -> Optional[int]:
    """Parse an ISO 8601 timestamp into epoch milliseconds (UTC).

    Roblox returns up to 7 fractional digits and a trailing ``Z``; both are
    normalised before parsing. Values without an offset are taken as UTC.
    Returns None for missing or unparsable input.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - EPOCH) // timedelta(milliseconds=1)
