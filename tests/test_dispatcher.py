from unittest.mock import AsyncMock

from asgiref.sync import async_to_sync
from django.test import TestCase

from submissions.models import Channel, NotificationLog
from submissions.orchestrator.dispatcher import NotificationDispatcher
from submissions.orchestrator.messages import render_text, tracking_url
from submissions.store import SubmissionStore
from submissions.utils.exceptions import StoreUnavailable
from tests.helpers import FakeSender, create_submission


class NotificationDispatcherTest(TestCase):

    def setUp(self):
        self.store = SubmissionStore()
        self.whatsapp = FakeSender(Channel.WHATSAPP)
        self.email = FakeSender(Channel.EMAIL, result={'success': True, 'response': {'sent': 1}})
        self.submission = create_submission()

    def _dispatcher(self, whatsapp=None, email=None, store=None, timeout=0.5):
        return NotificationDispatcher(store or self.store, whatsapp or self.whatsapp, email or self.email, timeout=timeout)

    def test_status_change_notifies_both_channels(self):
        result = async_to_sync(self._dispatcher().notify_status_changed)(self.submission, 'DIPROSES')

        self.assertTrue(result.whatsapp.succeeded)
        self.assertTrue(result.email.succeeded)
        self.assertEqual(self.whatsapp.calls[0]['recipient'], '+6281234567890')
        self.assertEqual(self.email.calls[0]['recipient'], 'budi@example.com')

        logs = NotificationLog.objects.filter(submission=self.submission)
        self.assertEqual(logs.count(), 2)
        self.assertEqual(set(logs.values_list('send_status', flat=True)), {'SUCCESS'})

    def test_message_content(self):
        async_to_sync(self._dispatcher().notify_status_changed)(self.submission, 'DIPROSES')

        body = self.whatsapp.calls[0]['content']['body']
        self.assertIn('Budi Santoso', body)
        self.assertIn('LP-20250101-00001', body)
        self.assertIn('Pembuatan KTP', body)
        self.assertIn('Sedang Diproses', body)
        self.assertIn('https://layanan.test/public?tab=status&tracking_code=LP-20250101-00001', body)

        email_content = self.email.calls[0]['content']
        self.assertEqual(email_content['subject'], 'Update Status Pengajuan - LP-20250101-00001')
        self.assertIn('Sedang Diproses', email_content['body'])

        log = NotificationLog.objects.get(submission=self.submission, channel='WHATSAPP')
        self.assertEqual(log.payload['event'], 'status_changed')
        self.assertEqual(log.payload['status_label'], 'Sedang Diproses')
        self.assertEqual(log.payload['destination'], '+6281234567890')
        self.assertEqual(log.payload['message'], body)

    def test_creation_event(self):
        result = async_to_sync(self._dispatcher().notify_created)(self.submission)
        self.assertTrue(result.whatsapp.succeeded)
        log = NotificationLog.objects.get(submission=self.submission, channel='EMAIL')
        self.assertEqual(log.payload['event'], 'created')
        self.assertIn('Pengajuan Baru', log.payload['message'])

    def test_no_email_skips_email_channel(self):
        submission = create_submission(tracking_code='LP-20250101-00002', email=None)

        result = async_to_sync(self._dispatcher().notify_status_changed)(submission, 'SELESAI')

        self.assertIsNone(result.email)
        self.assertEqual(self.email.calls, [])
        logs = NotificationLog.objects.filter(submission=submission)
        self.assertEqual(list(logs.values_list('channel', flat=True)), ['WHATSAPP'])

    def test_empty_email_skips_email_channel(self):
        submission = create_submission(tracking_code='LP-20250101-00003', email='')
        async_to_sync(self._dispatcher().notify_status_changed)(submission, 'SELESAI')
        self.assertFalse(NotificationLog.objects.filter(submission=submission, channel='EMAIL').exists())

    def test_whatsapp_failure_does_not_block_email(self):
        whatsapp = FakeSender(Channel.WHATSAPP, result={'success': False, 'error': 'invalid_number', 'response': None})

        result = async_to_sync(self._dispatcher(whatsapp=whatsapp).notify_status_changed)(self.submission, 'DITOLAK')

        self.assertFalse(result.whatsapp.succeeded)
        self.assertEqual(result.whatsapp.error, 'invalid_number')
        self.assertTrue(result.email.succeeded)
        wa_log = NotificationLog.objects.get(submission=self.submission, channel='WHATSAPP')
        self.assertEqual(wa_log.send_status, 'FAILED')
        self.assertEqual(wa_log.payload['error'], 'invalid_number')
        self.assertEqual(NotificationLog.objects.get(submission=self.submission, channel='EMAIL').send_status, 'SUCCESS')

    def test_sender_exception_is_logged_as_failed(self):
        email = FakeSender(Channel.EMAIL, error=ConnectionError('smtp down'))

        result = async_to_sync(self._dispatcher(email=email).notify_status_changed)(self.submission, 'DIPROSES')

        self.assertTrue(result.whatsapp.succeeded)
        self.assertFalse(result.email.succeeded)
        log = NotificationLog.objects.get(submission=self.submission, channel='EMAIL')
        self.assertEqual(log.send_status, 'FAILED')
        self.assertEqual(log.payload['error'], 'smtp down')

    def test_timeout_is_logged_as_failed(self):
        slow = FakeSender(Channel.WHATSAPP, delay=5)

        result = async_to_sync(self._dispatcher(whatsapp=slow, timeout=0.05).notify_status_changed)(
            self.submission, 'DIPROSES'
        )

        self.assertTrue(result.whatsapp.timed_out)
        self.assertFalse(result.whatsapp.succeeded)
        self.assertTrue(result.email.succeeded)
        log = NotificationLog.objects.get(submission=self.submission, channel='WHATSAPP')
        self.assertEqual(log.send_status, 'FAILED')
        self.assertTrue(log.payload['timeout'])

    def test_log_write_failure_does_not_propagate(self):
        store = SubmissionStore()
        store.log_notification = AsyncMock(side_effect=StoreUnavailable())

        result = async_to_sync(self._dispatcher(store=store).notify_status_changed)(self.submission, 'DIPROSES')

        self.assertTrue(result.whatsapp.succeeded)
        self.assertFalse(result.whatsapp.logged)
        self.assertEqual(NotificationLog.objects.count(), 0)


class MessageRenderingTest(TestCase):

    def test_render_text_keeps_unknown_placeholders(self):
        self.assertEqual(render_text('Halo {{nama}} {{other}}', {'nama': 'Ani'}), 'Halo Ani {{other}}')

    def test_tracking_url(self):
        self.assertEqual(
            tracking_url('LP-20250101-00001'),
            'https://layanan.test/public?tab=status&tracking_code=LP-20250101-00001',
        )
