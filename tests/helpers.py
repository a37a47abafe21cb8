import asyncio

from submissions.channels.base_handler import BaseChannelSender
from submissions.models import Channel, Submission, SubmissionStatus

VALID_NIK = '3201234567891234'


class FakeSender(BaseChannelSender):
    """Channel sender double recording every call."""

    def __init__(self, channel=Channel.WHATSAPP, result=None, delay=0, error=None, provider='fake'):
        super().__init__({})
        self.channel = channel
        self.provider = provider
        self.result = result if result is not None else {'success': True, 'response': {'sid': 'SMfake123'}}
        self.delay = delay
        self.error = error
        self.calls = []

    async def send(self, recipient, content, context):
        self.calls.append({'recipient': recipient, 'content': content, 'context': context})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.result


def submission_payload(**overrides):
    data = {
        'nama': 'Budi Santoso',
        'nik': VALID_NIK,
        'email': 'budi@example.com',
        'no_wa': '0812-3456-7890',
        'jenis_layanan': 'KTP',
        'consent': True,
    }
    data.update(overrides)
    return data


def create_submission(**overrides):
    fields = {
        'tracking_code': 'LP-20250101-00001',
        'nama': 'Budi Santoso',
        'nik': VALID_NIK,
        'email': 'budi@example.com',
        'no_wa': '+6281234567890',
        'jenis_layanan': 'KTP',
        'status': SubmissionStatus.PENGAJUAN_BARU.value,
    }
    fields.update(overrides)
    return Submission.objects.create(**fields)
