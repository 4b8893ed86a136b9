"""
Utility helper functions
"""
from datetime import date, datetime
from typing import Any, Optional

NOT_AVAILABLE = "N/A"


def parse_date(value: Any) -> Optional[date]:
    """Accept date, datetime, or an ISO string; anything else is None"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            return None
    return None


def format_date(value: Any, format_str: str = "%d/%m/%Y") -> str:
    """Format a date for the printed report; unparseable values print N/A"""
    parsed = parse_date(value)
    if not parsed:
        return NOT_AVAILABLE
    return parsed.strftime(format_str)


def calculate_age(date_of_birth: Any, on: Optional[date] = None) -> Optional[int]:
    born = parse_date(date_of_birth)
    if not born:
        return None
    today = on or date.today()
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))


def display(value: Any) -> str:
    """Render a stored value for the report"""
    if value is None or (isinstance(value, str) and not value.strip()):
        return NOT_AVAILABLE
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v not in (None, "")]
        return ", ".join(items) if items else NOT_AVAILABLE
    return str(value)
