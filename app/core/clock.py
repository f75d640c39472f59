from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Naive UTC now; every timestamp comparison in the services uses naive UTC."""
    return datetime.utcnow()


def utc_today() -> str:
    """Current UTC date as YYYY-MM-DD; all once-per-day checks compare against this."""
    return utc_now().date().isoformat()


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a Supabase timestamp (ISO string, optionally with Z or offset) into naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
