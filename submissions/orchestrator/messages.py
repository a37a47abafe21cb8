"""
Notification content for submission events.

Templates use ``{{key}}`` placeholders filled from the context built by
``build_context``. Rendering never fails: unknown placeholders are left as-is.
"""
import re
from urllib.parse import urlencode

from django.conf import settings

from submissions.models import service_label, status_label

EVENT_CREATED = 'created'
EVENT_STATUS_CHANGED = 'status_changed'

TEMPLATES = {
    EVENT_CREATED: {
        'whatsapp': {
            'body': (
                'Halo {{nama}}, pengajuan {{jenis_layanan}} Anda telah kami terima dengan kode tracking '
                '{{tracking_code}}. Status: {{status}}. Cek: {{tracking_url}}'
            ),
        },
        'email': {
            'subject': 'Pengajuan Diterima - {{tracking_code}}',
            'body': (
                'Halo {{nama}},\n\n'
                'Pengajuan {{jenis_layanan}} Anda telah kami terima.\n'
                'Kode Tracking: {{tracking_code}}\n'
                'Status: {{status}}\n\n'
                'Cek status pengajuan: {{tracking_url}}'
            ),
            'heading': 'Pengajuan Diterima',
            'intro': 'Pengajuan layanan Anda telah kami terima:',
        },
    },
    EVENT_STATUS_CHANGED: {
        'whatsapp': {
            'body': (
                'Halo {{nama}}, pengajuan {{jenis_layanan}} (#{{tracking_code}}) kini berstatus: '
                '{{status}}. Cek: {{tracking_url}}'
            ),
        },
        'email': {
            'subject': 'Update Status Pengajuan - {{tracking_code}}',
            'body': (
                'Halo {{nama}},\n\n'
                'Status pengajuan {{jenis_layanan}} Anda telah diperbarui.\n'
                'Kode Tracking: {{tracking_code}}\n'
                'Status Baru: {{status}}\n\n'
                'Cek status pengajuan: {{tracking_url}}'
            ),
            'heading': 'Update Status Pengajuan',
            'intro': 'Status pengajuan layanan Anda telah diperbarui:',
        },
    },
}

_PLACEHOLDER = re.compile(r'\{\{\s*(\w+)\s*\}\}')


def tracking_url(tracking_code: str) -> str:
    base = settings.APP_BASE_URL.rstrip('/')
    return f"{base}/public?{urlencode({'tab': 'status', 'tracking_code': tracking_code})}"


def build_context(submission, status=None) -> dict:
    status = status or submission.status
    return {
        'nama': submission.nama,
        'tracking_code': submission.tracking_code,
        'jenis_layanan': service_label(submission.jenis_layanan),
        'status': status_label(status),
        'tracking_url': tracking_url(submission.tracking_code),
    }


def render_text(text: str, context: dict) -> str:
    def replace(match):
        key = match.group(1)
        return str(context[key]) if key in context else match.group(0)
    return _PLACEHOLDER.sub(replace, text)


def render_content(event: str, channel: str, context: dict) -> dict:
    """Render every field of the ``event``/``channel`` template."""
    template = TEMPLATES[event][channel]
    return {key: render_text(value, context) for key, value in template.items()}
