"""
Indonesian phone number helpers.

Numbers are stored in a canonical international form (``+62...``). Normalization
never raises: invalid input still yields a canonical-looking string, which the
caller then checks with ``is_valid_mobile``.
"""
import re

COUNTRY_CODE = '62'

_NON_DIGITS = re.compile(r'[^0-9]')
_MOBILE_PATTERN = re.compile(r'^\+628[1-9][0-9]{6,11}$')


def normalize_phone(raw) -> str:
    """
    Convert a user-entered phone string into canonical ``+62`` form.

    Strips every non-digit and any leading zeros. Digits already starting with
    the country code are only prefixed with ``+``; anything else is assumed to
    be a local number missing its country code.

    Examples:
        "0812-3456-7890"   -> "+6281234567890"
        "+62 812 3456 7890" -> "+6281234567890"
        ""                  -> "+62"
    """
    digits = _NON_DIGITS.sub('', str(raw or '')).lstrip('0')
    if digits.startswith(COUNTRY_CODE):
        return f'+{digits}'
    return f'+{COUNTRY_CODE}{digits}'


def is_valid_mobile(canonical: str) -> bool:
    """True when the canonical number is a plausible Indonesian mobile (+628 plus 7-12 digits)."""
    return bool(canonical) and bool(_MOBILE_PATTERN.match(canonical))


def format_phone_for_display(raw) -> str:
    """Group a number as ``+62 8xx xxxx xxxx`` for admin screens; invalid numbers are returned canonical."""
    if not raw:
        return ''
    normalized = normalize_phone(raw)
    if not is_valid_mobile(normalized):
        return normalized

    national = normalized[len(COUNTRY_CODE) + 1:]
    groups = [national[:3]] + [national[i:i + 4] for i in range(3, len(national), 4)]
    return f'+{COUNTRY_CODE} ' + ' '.join(groups)
