"""
Submission lifecycle: creation and admin status transitions.

    PENGAJUAN_BARU --> DIPROSES --> SELESAI
          |                |
          +--------------> DITOLAK

Any status may move to any other status; there is no terminal state. Moving a
submission to the status it already has is rejected as a no-op. Every accepted
change is persisted before notifications go out, and a failed notification
never rolls the change back.
"""
import logging
from typing import Iterable, Mapping

from django.conf import settings

from submissions.models import STATUS_VALUES, SubmissionStatus
from submissions.serializers import SubmissionCreateSerializer
from submissions.services.types import (
    BulkTransitionResult, CreationResult, SubmissionInput, TransitionResult,
)
from submissions.utils.exceptions import (
    ConflictError, InputValidationError, InvalidStatusError, NoopError, NotFoundError, UniqueViolationError,
)
from submissions.utils.tracking import generate_tracking_code

logger = logging.getLogger('submissions.lifecycle')


def _error_lists(errors) -> dict:
    return {field: [str(message) for message in messages] for field, messages in errors.items()}


class SubmissionLifecycle:

    def __init__(self, store, dispatcher, max_attempts: int = None, code_generator=generate_tracking_code):
        self.store = store
        self.dispatcher = dispatcher
        self.max_attempts = max_attempts or settings.TRACKING_CODE_MAX_ATTEMPTS
        self.code_generator = code_generator

    def validate(self, data: Mapping) -> SubmissionInput:
        """Validate raw intake data, raising ``InputValidationError`` with every field error."""
        serializer = SubmissionCreateSerializer(data=data)
        if not serializer.is_valid():
            raise InputValidationError(errors=_error_lists(serializer.errors))
        return serializer.to_input()

    async def create(self, data) -> CreationResult:
        submission_input = data if isinstance(data, SubmissionInput) else self.validate(data)
        submission = await self._insert_with_unique_code(submission_input)
        logger.info(f"Submission created: {submission.tracking_code} ({submission.jenis_layanan})")

        notifications = await self.dispatcher.notify_created(submission)
        return CreationResult(
            tracking_code=submission.tracking_code,
            submission_id=str(submission.id),
            notifications=notifications,
        )

    async def _insert_with_unique_code(self, submission_input: SubmissionInput):
        fields = {
            'nama': submission_input.nama,
            'nik': submission_input.nik,
            'email': submission_input.email,
            'no_wa': submission_input.no_wa,
            'jenis_layanan': submission_input.jenis_layanan,
            'status': SubmissionStatus.PENGAJUAN_BARU.value,
        }
        for attempt in range(1, self.max_attempts + 1):
            tracking_code = self.code_generator()
            try:
                return await self.store.insert({**fields, 'tracking_code': tracking_code})
            except UniqueViolationError:
                logger.warning(f"Tracking code collision on attempt {attempt}/{self.max_attempts}: {tracking_code}")
        logger.error(f"No unique tracking code after {self.max_attempts} attempts")
        raise ConflictError()

    async def transition(self, submission_id, new_status: str) -> TransitionResult:
        if new_status not in STATUS_VALUES:
            raise InvalidStatusError(errors={'status': [f"Status harus salah satu dari: {', '.join(sorted(STATUS_VALUES))}"]})

        submission = await self.store.find_by_id(submission_id)
        old_status = submission.status
        if old_status == new_status:
            raise NoopError()

        submission = await self.store.update_status(submission.id, new_status)
        logger.info(f"Submission {submission.tracking_code} status changed: {old_status} -> {new_status}")

        notifications = await self.dispatcher.notify_status_changed(submission, new_status)
        return TransitionResult(
            submission_id=str(submission.id),
            old_status=old_status,
            new_status=new_status,
            notifications=notifications,
        )

    async def bulk_transition(self, submission_ids: Iterable, new_status: str) -> BulkTransitionResult:
        """
        Apply ``transition`` to every id in order. Missing submissions and
        no-ops are reported per id; an invalid status rejects the whole batch.
        """
        if new_status not in STATUS_VALUES:
            raise InvalidStatusError(errors={'status': [f"Status harus salah satu dari: {', '.join(sorted(STATUS_VALUES))}"]})

        result = BulkTransitionResult(new_status=new_status)
        for submission_id in dict.fromkeys(str(i) for i in submission_ids):
            try:
                result.updated.append(await self.transition(submission_id, new_status))
            except NotFoundError:
                result.failed.append({'id': submission_id, 'reason': 'not_found'})
            except NoopError:
                result.failed.append({'id': submission_id, 'reason': 'noop'})

        logger.info(f"Bulk update: {result.updated_count} submissions updated to status {new_status}")
        return result
