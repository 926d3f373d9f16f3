"""Shared validation utilities"""

import re
from datetime import date, datetime, timezone
from typing import Optional

from ..security_utils import check_password_strength


def validate_au_mobile(mobile: Optional[str]) -> Optional[str]:
    """
    Validate an Australian mobile number.

    Accepts 04XX XXX XXX, 614XXXXXXXX and +61 4XX XXX XXX in any spacing.

    Returns:
        The number with surrounding whitespace removed

    Raises:
        ValueError: If the number is not a valid Australian mobile
    """
    if mobile is None or not mobile.strip():
        raise ValueError("Phone number is required")

    digits = re.sub(r"\D", "", mobile)
    if (len(digits) == 10 and digits.startswith("04")) or (
        len(digits) == 11 and digits.startswith("614")
    ):
        return mobile.strip()

    raise ValueError("Please enter a valid Australian mobile number (e.g., 04XX XXX XXX)")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email or not email.strip():
        raise ValueError("Email is required")

    email = email.strip().lower()
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Please enter a valid email address")

    return email


def validate_password(password: str) -> str:
    """Raise ValueError with the first unmet password rule"""
    result = check_password_strength(password or "")
    if not result["is_valid"]:
        raise ValueError(result["feedback"][0])
    return password


def normalize_abn(abn: Optional[str]) -> Optional[str]:
    """
    Normalize an Australian Business Number.

    Blank input means "no ABN" and returns None. Spaces are ignored;
    what remains must be exactly 11 digits.
    """
    if abn is None:
        return None
    compact = re.sub(r"\s+", "", abn)
    if not compact:
        return None
    if not re.fullmatch(r"\d{11}", compact):
        raise ValueError("ABN must be 11 digits")
    return compact


def to_title_case(value: str) -> str:
    """'hello WORLD' -> 'Hello World'"""
    return " ".join(word[:1].upper() + word[1:].lower() for word in value.split(" "))


def slugify(value: str) -> str:
    """'Support Worker' -> 'support-worker' (lowercase, whitespace runs to '-')"""
    return re.sub(r"\s+", "-", value.strip().lower())


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD, DD/MM/YYYY or an ISO datetime; None when unparsable"""
    if not value:
        return None
    value = value.strip()
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def calculate_age(date_of_birth: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Age in whole years from a date-of-birth string; None when unparsable or in the future"""
    dob = parse_date(date_of_birth)
    if not dob:
        return None
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age if age >= 0 else None


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date or datetime into a naive UTC datetime; None when unparsable"""
    if not value or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        day = parse_date(value)
        return datetime(day.year, day.month, day.day) if day else None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
