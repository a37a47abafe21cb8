import hmac
import logging
import re

from submissions.services.types import RedactedSubmissionView
from submissions.utils.exceptions import ForbiddenError, InputValidationError, NotFoundError

logger = logging.getLogger('submissions.lookup')

_LAST4 = re.compile(r'^[0-9]{4}$')

# Same body for unknown code and wrong NIK so responses do not reveal which codes exist
LOOKUP_FAILED_MESSAGE = 'Kode tracking atau 4 digit terakhir NIK tidak sesuai'


class StatusLookupService:
    """Public, read-only status check by tracking code plus the last four NIK digits."""

    def __init__(self, store):
        self.store = store

    async def check(self, tracking_code: str, last4_nik: str) -> RedactedSubmissionView:
        tracking_code = (tracking_code or '').strip()
        last4_nik = (last4_nik or '').strip()

        errors = {}
        if not tracking_code:
            errors['tracking_code'] = ['Kode tracking wajib diisi']
        if not _LAST4.match(last4_nik):
            errors['last4_nik'] = ['4 digit terakhir NIK harus berupa 4 angka']
        if errors:
            raise InputValidationError(errors=errors)

        try:
            submission = await self.store.find_by_tracking_code(tracking_code)
        except NotFoundError:
            logger.info(f"Status lookup for unknown tracking code {tracking_code}")
            raise NotFoundError(LOOKUP_FAILED_MESSAGE)

        if not hmac.compare_digest(submission.nik_last4.encode(), last4_nik.encode()):
            logger.warning(f"Status lookup for {tracking_code} with mismatched NIK digits")
            raise ForbiddenError(LOOKUP_FAILED_MESSAGE)

        return RedactedSubmissionView.from_submission(submission)
