from django.db import models
from django.core.validators import RegexValidator
from enum import Enum
import uuid
from django.db.models import JSONField
import logging

logger = logging.getLogger('submissions')


class SubmissionStatus(Enum):
    PENGAJUAN_BARU = 'PENGAJUAN_BARU'
    DIPROSES = 'DIPROSES'
    SELESAI = 'SELESAI'
    DITOLAK = 'DITOLAK'


class ServiceType(Enum):
    KTP = 'KTP'
    KK = 'KK'
    AKTA = 'AKTA'
    SKCK = 'SKCK'
    SURAT_PINDAH = 'SURAT_PINDAH'
    SURAT_KETERANGAN = 'SURAT_KETERANGAN'


class Channel(Enum):
    WHATSAPP = 'WHATSAPP'
    EMAIL = 'EMAIL'


class SendStatus(Enum):
    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'


STATUS_LABELS = {
    SubmissionStatus.PENGAJUAN_BARU: 'Pengajuan Baru',
    SubmissionStatus.DIPROSES: 'Sedang Diproses',
    SubmissionStatus.SELESAI: 'Selesai',
    SubmissionStatus.DITOLAK: 'Ditolak',
}

SERVICE_LABELS = {
    ServiceType.KTP: 'Pembuatan KTP',
    ServiceType.KK: 'Pembuatan Kartu Keluarga',
    ServiceType.AKTA: 'Pembuatan Akta Kelahiran',
    ServiceType.SKCK: 'Pembuatan SKCK',
    ServiceType.SURAT_PINDAH: 'Surat Pindah',
    ServiceType.SURAT_KETERANGAN: 'Surat Keterangan',
}

STATUS_VALUES = frozenset(tag.value for tag in SubmissionStatus)
SERVICE_VALUES = frozenset(tag.value for tag in ServiceType)


def status_label(status) -> str:
    """Human-readable label for a status; unmapped values pass through unchanged."""
    try:
        return STATUS_LABELS[SubmissionStatus(status)]
    except ValueError:
        return str(status)


def service_label(service) -> str:
    try:
        return SERVICE_LABELS[ServiceType(service)]
    except ValueError:
        return str(service)


nik_validator = RegexValidator(r'^[0-9]{16}$', 'NIK harus 16 digit angka')


class Submission(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tracking_code = models.CharField(max_length=32, unique=True, editable=False)
    nama = models.CharField(max_length=255)
    nik = models.CharField(max_length=16, validators=[nik_validator], editable=False)
    email = models.EmailField(null=True, blank=True)
    no_wa = models.CharField(max_length=20)  # stored normalized, e.g. +6281234567890
    jenis_layanan = models.CharField(max_length=32, choices=[(tag.value, tag.name) for tag in ServiceType])
    status = models.CharField(max_length=20, choices=[(tag.value, tag.name) for tag in SubmissionStatus], default=SubmissionStatus.PENGAJUAN_BARU.value)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'submissions'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='submissions_status_1c6f0e_idx'),
            models.Index(fields=['jenis_layanan'], name='submissions_jenis_l_4b2d9a_idx'),
        ]

    @property
    def status_label(self) -> str:
        return status_label(self.status)

    @property
    def nik_last4(self) -> str:
        return self.nik[-4:]

    def __str__(self):
        return f"{self.tracking_code} ({self.status})"


class NotificationLog(models.Model):
    """One attempt to notify a requester on one channel. Append-only."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    submission = models.ForeignKey(Submission, on_delete=models.PROTECT, related_name='notification_logs')
    channel = models.CharField(max_length=10, choices=[(tag.value, tag.name) for tag in Channel])
    send_status = models.CharField(max_length=10, choices=[(tag.value, tag.name) for tag in SendStatus])
    payload = JSONField(default=dict)  # destination, rendered text, provider response or error
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'notification_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['submission', 'channel'], name='notificatio_submiss_7e21c3_idx'),
            models.Index(fields=['channel', 'send_status'], name='notificatio_channel_93d5b8_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("NotificationLog entries are append-only and cannot be modified")
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.channel} {self.send_status} for {self.submission_id}"
