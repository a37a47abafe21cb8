import secrets
from datetime import date
from typing import Optional

from django.conf import settings
from django.utils import timezone

SUFFIX_DIGITS = 5


def generate_tracking_code(prefix: Optional[str] = None, today: Optional[date] = None) -> str:
    """
    Build a human-shareable tracking code: ``PREFIX-YYYYMMDD-NNNNN``.

    The suffix is a zero-padded random number, so same-day collisions are
    unlikely but possible; uniqueness is enforced by the store.
    """
    prefix = prefix or getattr(settings, 'TRACKING_CODE_PREFIX', 'LP')
    today = today or timezone.localdate()
    suffix = secrets.randbelow(10 ** SUFFIX_DIGITS)
    return f"{prefix}-{today:%Y%m%d}-{suffix:0{SUFFIX_DIGITS}d}"
