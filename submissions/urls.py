from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView
from .views import (
    HealthView, SubmissionCreateView, SubmissionStatusCheckView, AdminLoginView,
    AdminSubmissionListView, AdminSubmissionDetailView, AdminStatusUpdateView,
    AdminBulkStatusView, AdminNotificationLogView, DashboardView,
)

app_name = 'submissions'

urlpatterns = [
    path('health/', HealthView.as_view(), name='health'),

    # Public
    path('submissions/', SubmissionCreateView.as_view(), name='submission-create'),
    path('submissions/<str:tracking_code>/', SubmissionStatusCheckView.as_view(), name='submission-status-check'),

    # Admin
    path('admin/login/', AdminLoginView.as_view(), name='admin-login'),
    path('admin/login/refresh/', TokenRefreshView.as_view(), name='admin-login-refresh'),
    path('admin/dashboard/', DashboardView.as_view(), name='admin-dashboard'),
    path('admin/submissions/', AdminSubmissionListView.as_view(), name='admin-submission-list'),
    path('admin/submissions/bulk-status/', AdminBulkStatusView.as_view(), name='admin-submission-bulk-status'),
    path('admin/submissions/<str:submission_id>/', AdminSubmissionDetailView.as_view(), name='admin-submission-detail'),
    path('admin/submissions/<str:submission_id>/status/', AdminStatusUpdateView.as_view(), name='admin-submission-status'),
    path('admin/submissions/<str:submission_id>/notifications/', AdminNotificationLogView.as_view(), name='admin-submission-notifications'),
]
