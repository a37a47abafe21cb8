"""
Durable submission store.

Async facade over the Django ORM. Every public method may suspend; the ORM
work itself runs through ``sync_to_async`` on the thread-sensitive executor so
it shares the request's database connection. Connectivity failures surface as
``StoreUnavailable``; they are not retried here.
"""
import logging
import uuid
from functools import wraps
from typing import Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, InterfaceError, OperationalError, connection, transaction
from django.db.models import Count
from django.http import QueryDict

from submissions.filters import SubmissionFilter
from submissions.models import NotificationLog, Submission, SubmissionStatus
from submissions.utils.exceptions import (
    InputValidationError, NotFoundError, StoreUnavailable, UniqueViolationError,
)

logger = logging.getLogger('submissions.store')

DEFAULT_ORDERING = '-created_at'


def _guard_connectivity(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Database unavailable during {func.__name__}: {str(e)}")
            raise StoreUnavailable() from e
    return wrapper


def _as_uuid(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFoundError()


class SubmissionStore:
    """Owns persistence of submissions and their notification logs."""

    # ------------------------------------------------------------------ setup

    async def ensure_ready(self) -> None:
        await sync_to_async(self._ensure_ready)()

    @_guard_connectivity
    def _ensure_ready(self):
        connection.ensure_connection()
        # Raises OperationalError if migrations were never applied
        Submission.objects.exists()

    # ------------------------------------------------------------ submissions

    async def insert(self, fields: dict) -> Submission:
        return await sync_to_async(self._insert)(fields)

    @_guard_connectivity
    def _insert(self, fields: dict) -> Submission:
        try:
            with transaction.atomic():
                submission = Submission.objects.create(**fields)
        except IntegrityError as e:
            logger.warning(f"Tracking code {fields.get('tracking_code')} already taken")
            raise UniqueViolationError() from e
        logger.info(f"Submission {submission.id} stored with tracking code {submission.tracking_code}")
        return submission

    async def find_by_tracking_code(self, code: str) -> Submission:
        return await sync_to_async(self._find_by_tracking_code)(code)

    @_guard_connectivity
    def _find_by_tracking_code(self, code: str) -> Submission:
        try:
            return Submission.objects.get(tracking_code=code)
        except Submission.DoesNotExist:
            raise NotFoundError()

    async def find_by_id(self, submission_id) -> Submission:
        return await sync_to_async(self._find_by_id)(submission_id)

    @_guard_connectivity
    def _find_by_id(self, submission_id) -> Submission:
        try:
            return Submission.objects.get(id=_as_uuid(submission_id))
        except Submission.DoesNotExist:
            raise NotFoundError()

    async def update_status(self, submission_id, new_status: str) -> Submission:
        return await sync_to_async(self._update_status)(submission_id, new_status)

    @_guard_connectivity
    def _update_status(self, submission_id, new_status: str) -> Submission:
        with transaction.atomic():
            try:
                submission = Submission.objects.select_for_update().get(id=_as_uuid(submission_id))
            except Submission.DoesNotExist:
                raise NotFoundError()
            submission.status = new_status
            # auto_now refreshes updated_at on save
            submission.save(update_fields=['status', 'updated_at'])
        return submission

    async def list_all(self, filters: Optional[dict] = None, ordering: Optional[str] = None) -> list:
        return await sync_to_async(self._list_all)(filters, ordering)

    @_guard_connectivity
    def _list_all(self, filters, ordering) -> list:
        data = QueryDict(mutable=True)
        for key, value in (filters or {}).items():
            if value not in (None, ''):
                data[key] = value
        data['ordering'] = ordering or data.get('ordering') or DEFAULT_ORDERING

        filterset = SubmissionFilter(data, queryset=Submission.objects.all())
        if not filterset.is_valid():
            errors = {
                field: [error['message'] for error in field_errors]
                for field, field_errors in filterset.errors.get_json_data().items()
            }
            raise InputValidationError('Filter tidak valid', errors=errors)
        return list(filterset.qs)

    async def status_counts(self) -> dict:
        return await sync_to_async(self._status_counts)()

    @_guard_connectivity
    def _status_counts(self) -> dict:
        counts = {tag.value: 0 for tag in SubmissionStatus}
        for row in Submission.objects.order_by().values('status').annotate(count=Count('id')):
            counts[row['status']] = row['count']
        return counts

    # ------------------------------------------------------- notification logs

    async def log_notification(self, submission_id, channel: str, send_status: str, payload: dict) -> NotificationLog:
        return await sync_to_async(self._log_notification)(submission_id, channel, send_status, payload)

    @_guard_connectivity
    def _log_notification(self, submission_id, channel, send_status, payload) -> NotificationLog:
        return NotificationLog.objects.create(
            submission_id=submission_id,
            channel=channel,
            send_status=send_status,
            payload=payload,
        )

    async def list_notification_logs(self, submission_id=None) -> list:
        return await sync_to_async(self._list_notification_logs)(submission_id)

    @_guard_connectivity
    def _list_notification_logs(self, submission_id) -> list:
        logs = NotificationLog.objects.select_related('submission')
        if submission_id is not None:
            logs = logs.filter(submission_id=_as_uuid(submission_id))
        return list(logs)

    async def notification_summary(self) -> dict:
        return await sync_to_async(self._notification_summary)()

    @_guard_connectivity
    def _notification_summary(self) -> dict:
        summary = {}
        rows = NotificationLog.objects.order_by().values('channel', 'send_status').annotate(count=Count('id'))
        for row in rows:
            channel = summary.setdefault(row['channel'], {'total': 0, 'SUCCESS': 0, 'FAILED': 0})
            channel[row['send_status']] = row['count']
            channel['total'] += row['count']
        return summary
