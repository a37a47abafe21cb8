from rest_framework import status
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.views import APIView
from rest_framework.pagination import PageNumberPagination
from rest_framework_simplejwt.views import TokenObtainPairView
from asgiref.sync import async_to_sync
from django.apps import apps
from submissions.serializers import (
    AdminTokenObtainPairSerializer, BulkStatusSerializer, NotificationLogSerializer,
    RedactedSubmissionSerializer, StatusUpdateSerializer, SubmissionSerializer, TransitionResultSerializer,
)
from submissions.utils.exceptions import InputValidationError
import logging

logger = logging.getLogger('submissions.api')

PAGINATION_PARAMS = ('page', 'page_size')


def get_services():
    return apps.get_app_config('submissions').services


def _validated(serializer_class, data) -> dict:
    serializer = serializer_class(data=data)
    if not serializer.is_valid():
        raise InputValidationError(
            errors={field: [str(m) for m in messages] for field, messages in serializer.errors.items()}
        )
    return serializer.validated_data


class StandardResultsSetPagination(PageNumberPagination):
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 100


class HealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        async_to_sync(get_services().store.ensure_ready)()
        return Response({'status': 'healthy', 'service': 'layanan_service'})


class SubmissionCreateView(APIView):
    """Public intake: validate, store, notify, return the tracking code."""
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        result = async_to_sync(get_services().lifecycle.create)(request.data)
        return Response({
            'message': 'Pengajuan berhasil dibuat',
            'tracking_code': result.tracking_code,
            'submission_id': result.submission_id,
        }, status=status.HTTP_201_CREATED)


class SubmissionStatusCheckView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, tracking_code):
        view = async_to_sync(get_services().lookup.check)(
            tracking_code, request.query_params.get('last4_nik', '')
        )
        return Response(RedactedSubmissionSerializer(view).data)


class AdminLoginView(TokenObtainPairView):
    serializer_class = AdminTokenObtainPairSerializer


class AdminSubmissionListView(APIView):
    permission_classes = [IsAdminUser]
    pagination_class = StandardResultsSetPagination

    def get(self, request):
        filters = {k: v for k, v in request.query_params.items() if k not in PAGINATION_PARAMS}
        ordering = filters.pop('ordering', None)
        submissions = async_to_sync(get_services().store.list_all)(filters, ordering)

        paginator = self.pagination_class()
        page = paginator.paginate_queryset(submissions, request, view=self)
        return paginator.get_paginated_response(SubmissionSerializer(page, many=True).data)


class AdminSubmissionDetailView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, submission_id):
        submission = async_to_sync(get_services().store.find_by_id)(submission_id)
        return Response(SubmissionSerializer(submission).data)


class AdminStatusUpdateView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request, submission_id):
        data = _validated(StatusUpdateSerializer, request.data)
        result = async_to_sync(get_services().lifecycle.transition)(submission_id, data['status'])
        logger.info(f"Admin {request.user.get_username()} set {submission_id} to {result.new_status}")
        return Response({
            'message': 'Status berhasil diupdate',
            **TransitionResultSerializer(result).data,
        })


class AdminBulkStatusView(APIView):
    permission_classes = [IsAdminUser]

    def patch(self, request):
        data = _validated(BulkStatusSerializer, request.data)
        result = async_to_sync(get_services().lifecycle.bulk_transition)(data['submission_ids'], data['status'])
        logger.info(f"Admin {request.user.get_username()} bulk-updated {result.updated_count} submissions")
        return Response({
            'message': f'{result.updated_count} pengajuan berhasil diupdate',
            'status': result.new_status,
            'updated_count': result.updated_count,
            'updated': TransitionResultSerializer(result.updated, many=True).data,
            'failed': result.failed,
        })


class AdminNotificationLogView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request, submission_id):
        store = get_services().store
        submission = async_to_sync(store.find_by_id)(submission_id)
        logs = async_to_sync(store.list_notification_logs)(submission.id)
        return Response(NotificationLogSerializer(logs, many=True).data)


class DashboardView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        store = get_services().store
        counts = async_to_sync(store.status_counts)()
        return Response({
            'total': sum(counts.values()),
            'by_status': counts,
            'notifications': async_to_sync(store.notification_summary)(),
        })
