import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('submissions.api')


class SubmissionServiceError(Exception):
    """Base class for errors raised by the submission lifecycle core."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Terjadi kesalahan internal server'

    def __init__(self, message: str = None, errors: dict = None):
        self.message = message or self.default_message
        self.errors = errors or {}
        super().__init__(self.message)


class InputValidationError(SubmissionServiceError):
    """Client input malformed or incomplete; carries every field error at once."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Data yang dikirim tidak valid'


class InvalidStatusError(SubmissionServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Status tidak valid'


class NoopError(SubmissionServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Status pengajuan sudah sama dengan status yang diminta'


class NotFoundError(SubmissionServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Data pengajuan tidak ditemukan'


class ForbiddenError(SubmissionServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Verifikasi NIK gagal'


class UniqueViolationError(SubmissionServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Kode tracking sudah digunakan'


class ConflictError(SubmissionServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = 'Gagal membuat kode tracking unik, silakan coba lagi'


class ChannelSendFailure(SubmissionServiceError):
    """A notification transport failed. Recorded in the log, never surfaced to callers."""
    default_message = 'Pengiriman notifikasi gagal'


class StoreUnavailable(SubmissionServiceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Layanan sedang tidak tersedia, silakan coba beberapa saat lagi'


def api_exception_handler(exc, context):
    """DRF exception handler rendering domain errors as {message, errors}."""
    if isinstance(exc, SubmissionServiceError):
        if exc.status_code >= 500:
            logger.error(f"Server fault in {context['view'].__class__.__name__}: {exc}", exc_info=exc)
            # Generic message only; internal detail stays in the log
            return Response({'message': exc.default_message}, status=exc.status_code)
        body = {'message': exc.message}
        if exc.errors:
            body['errors'] = exc.errors
        return Response(body, status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        logger.error(f"Unhandled error in {context['view'].__class__.__name__}: {exc}", exc_info=exc)
        return Response(
            {'message': SubmissionServiceError.default_message},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return response
