import django_filters
from django.db.models import Q

from submissions.models import Submission, SubmissionStatus, ServiceType


class SubmissionFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=[(tag.value, tag.name) for tag in SubmissionStatus])
    jenis_layanan = django_filters.ChoiceFilter(choices=[(tag.value, tag.name) for tag in ServiceType])
    search = django_filters.CharFilter(method='filter_search')
    created_after = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='gte')
    created_before = django_filters.IsoDateTimeFilter(field_name='created_at', lookup_expr='lte')
    ordering = django_filters.OrderingFilter(
        fields=('created_at', 'updated_at', 'nama', 'status', 'tracking_code'),
    )

    class Meta:
        model = Submission
        fields = ['status', 'jenis_layanan']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(nama__icontains=value) | Q(tracking_code__icontains=value))
