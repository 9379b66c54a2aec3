"""GEDCOM date parsing and formatting."""

import logging
import re
from datetime import date

log = logging.getLogger(__name__)

MONTHS = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN", "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]

# Month abbreviation -> month number
MONTH_MAP = {abbr: i for i, abbr in enumerate(MONTHS, start=1)}

_ISO_RE = re.compile(r"^(\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?$")


def parse_gedcom_date(date_str: str | None) -> str | None:
    """
    Parse a GEDCOM date value into ISO format (YYYY-MM-DD).

    Accepts three shapes:
    - "25 NOV 1954" (day month year)
    - "NOV 1954" (month year, day defaults to 1)
    - "1954" (year only, month and day default to 1)

    Anything else ("ABT 1900", "BET 1850 AND 1860", ...) is returned unchanged,
    and so is a day the month does not have ("32 JAN 1900", "29 FEB 1901").
    """
    if date_str is None:
        return None

    s = date_str.strip()
    if not s:
        return None

    parts = s.split()

    # Pattern 1: "25 NOV 1954"
    if len(parts) == 3:
        day, month_str, year = parts
        month = MONTH_MAP.get(month_str.upper())
        if day.isdigit() and month and _is_year(year):
            try:
                return date(int(year), month, int(day)).isoformat()
            except ValueError:
                log.debug("Day out of range in %r", s)

    # Pattern 2: "NOV 1954"
    elif len(parts) == 2:
        month_str, year = parts
        month = MONTH_MAP.get(month_str.upper())
        if month and _is_year(year):
            return f"{int(year):04d}-{month:02d}-01"

    # Pattern 3: "1954"
    elif len(parts) == 1 and _is_year(parts[0]):
        return f"{int(parts[0]):04d}-01-01"

    log.debug("Keeping unparsed date %r", s)
    return s


def format_gedcom_date(value: str | None) -> str | None:
    """
    Format an ISO date (full or partial) as a GEDCOM date, e.g. "2015-11-02" -> "2 NOV 2015".

    Partial dates are normalized to full dates ("1990" -> "1 JAN 1990").
    Values that are not ISO dates are passed through unchanged.
    """
    if value is None:
        return None

    s = value.strip()
    if not s:
        return None

    match = _ISO_RE.match(s)
    if not match:
        return s

    year = int(match.group(1))
    month = int(match.group(2) or 1)
    day = int(match.group(3) or 1)
    if not 1 <= month <= 12:
        return s

    return f"{day} {MONTHS[month - 1]} {year}"


def _is_year(token: str) -> bool:
    return len(token) == 4 and token.isdigit()
