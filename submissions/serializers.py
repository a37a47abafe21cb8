import logging
from rest_framework import exceptions, serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from submissions.models import (
    Submission, NotificationLog, ServiceType, nik_validator, status_label, service_label,
)
from submissions.services.types import SubmissionInput
from submissions.utils.phone import normalize_phone, is_valid_mobile, format_phone_for_display

logger = logging.getLogger('submissions')

REQUIRED = 'Wajib diisi'


class SubmissionCreateSerializer(serializers.Serializer):
    """
    Public intake boundary. Collects every field error in one pass; a valid
    instance converts to an immutable ``SubmissionInput`` via ``to_input()``.
    """
    nama = serializers.CharField(
        max_length=255,
        error_messages={'required': REQUIRED, 'blank': 'Nama wajib diisi', 'null': 'Nama wajib diisi'},
    )
    nik = serializers.CharField(
        validators=[nik_validator],
        error_messages={'required': REQUIRED, 'blank': 'NIK wajib diisi', 'null': 'NIK wajib diisi'},
    )
    email = serializers.EmailField(
        required=False, allow_blank=True, allow_null=True, max_length=254,
        error_messages={'invalid': 'Format email tidak valid', 'max_length': 'Email maksimal 254 karakter'},
    )
    no_wa = serializers.CharField(
        error_messages={'required': REQUIRED, 'blank': 'Nomor WhatsApp wajib diisi', 'null': 'Nomor WhatsApp wajib diisi'},
    )
    jenis_layanan = serializers.ChoiceField(
        choices=[(tag.value, tag.name) for tag in ServiceType],
        error_messages={
            'required': REQUIRED,
            'invalid_choice': 'Jenis layanan tidak valid',
            'null': 'Jenis layanan wajib diisi',
        },
    )
    consent = serializers.BooleanField(
        error_messages={'required': 'Persetujuan wajib diberikan', 'invalid': 'Persetujuan tidak valid'},
    )

    def validate_email(self, value):
        return value or None

    def validate_no_wa(self, value):
        if any(ch.isdigit() and not ch.isascii() for ch in value):
            raise serializers.ValidationError('Format nomor WhatsApp tidak valid')
        canonical = normalize_phone(value)
        if not is_valid_mobile(canonical):
            raise serializers.ValidationError('Format nomor WhatsApp tidak valid')
        return canonical

    def validate_consent(self, value):
        if value is not True:
            raise serializers.ValidationError('Persetujuan wajib diberikan')
        return value

    def to_input(self) -> SubmissionInput:
        data = self.validated_data
        return SubmissionInput(
            nama=data['nama'],
            nik=data['nik'],
            no_wa=data['no_wa'],
            jenis_layanan=data['jenis_layanan'],
            email=data.get('email'),
        )


class SubmissionSerializer(serializers.ModelSerializer):
    """Full record, admin only."""
    status_label = serializers.SerializerMethodField()
    jenis_layanan_label = serializers.SerializerMethodField()
    no_wa_display = serializers.SerializerMethodField()

    class Meta:
        model = Submission
        fields = [
            'id', 'tracking_code', 'nama', 'nik', 'email', 'no_wa', 'no_wa_display',
            'jenis_layanan', 'jenis_layanan_label', 'status', 'status_label', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_status_label(self, obj) -> str:
        return status_label(obj.status)

    def get_jenis_layanan_label(self, obj) -> str:
        return service_label(obj.jenis_layanan)

    def get_no_wa_display(self, obj) -> str:
        return format_phone_for_display(obj.no_wa)


class NotificationLogSerializer(serializers.ModelSerializer):
    class Meta:
        model = NotificationLog
        fields = ['id', 'submission', 'channel', 'send_status', 'payload', 'created_at']
        read_only_fields = fields


class StatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(error_messages={'required': 'Status wajib diisi', 'blank': 'Status wajib diisi'})


class BulkStatusSerializer(serializers.Serializer):
    submission_ids = serializers.ListField(
        child=serializers.CharField(),
        allow_empty=False,
        error_messages={
            'required': 'submission_ids harus berupa array yang tidak kosong',
            'empty': 'submission_ids harus berupa array yang tidak kosong',
            'not_a_list': 'submission_ids harus berupa array yang tidak kosong',
        },
    )
    status = serializers.CharField(error_messages={'required': 'Status wajib diisi', 'blank': 'Status wajib diisi'})


class RedactedSubmissionSerializer(serializers.Serializer):
    """Public status view. Serializes a ``RedactedSubmissionView``."""
    nama = serializers.CharField()
    jenis_layanan = serializers.CharField()
    jenis_layanan_label = serializers.SerializerMethodField()
    tracking_code = serializers.CharField()
    status = serializers.CharField()
    status_label = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()

    def get_status_label(self, obj) -> str:
        return status_label(obj.status)

    def get_jenis_layanan_label(self, obj) -> str:
        return service_label(obj.jenis_layanan)


class TransitionResultSerializer(serializers.Serializer):
    submission_id = serializers.CharField()
    old_status = serializers.CharField()
    new_status = serializers.CharField()
    notifications = serializers.SerializerMethodField()

    def get_notifications(self, obj) -> dict:
        return {outcome.channel: outcome.send_status for outcome in obj.notifications.outcomes}


class AdminTokenObtainPairSerializer(TokenObtainPairSerializer):
    """JWT login restricted to staff accounts."""
    default_error_messages = {
        'no_active_account': 'Username atau password salah',
    }

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_staff:
            logger.warning(f"Non-staff login attempt on admin endpoint: {self.user.get_username()}")
            raise exceptions.PermissionDenied('Akun tidak memiliki akses admin')
        data['username'] = self.user.get_username()
        return data
