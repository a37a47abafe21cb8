import pytest
import requests
from django.core import mail
from django.core.exceptions import ImproperlyConfigured
from django.test import TestCase
from unittest.mock import patch, MagicMock
from asgiref.sync import async_to_sync
from twilio.base.exceptions import TwilioRestException
from submissions.channels import (
    ConsoleWhatsAppSender, EmailSender, SiCubaWhatsAppSender, TwilioWhatsAppSender,
    get_email_sender, get_whatsapp_sender,
)

CONTEXT = {
    'nama': 'Budi Santoso',
    'tracking_code': 'LP-20250101-00001',
    'jenis_layanan': 'Pembuatan KTP',
    'status': 'Sedang Diproses',
    'tracking_url': 'https://layanan.test/public?tab=status&tracking_code=LP-20250101-00001',
}


class TwilioWhatsAppSenderTest(TestCase):
    """Test Twilio WhatsApp channel"""

    def setUp(self):
        self.credentials = {
            "account_sid": "ACtest1234567890",
            "auth_token": "test_auth_token",
            "from_number": "+14155238886"
        }

    @patch('submissions.channels.whatsapp_handler.Client')
    def test_send_success(self, mock_client_class):
        mock_client = MagicMock()
        mock_message = MagicMock()
        mock_message.sid = "SM1234567890"
        mock_message.status = "queued"
        mock_client.messages.create.return_value = mock_message
        mock_client_class.return_value = mock_client

        sender = TwilioWhatsAppSender(self.credentials)
        result = async_to_sync(sender.send)("+6281234567890", {"body": "Halo Budi"}, CONTEXT)

        self.assertTrue(result['success'])
        self.assertEqual(result['response']['sid'], "SM1234567890")
        self.assertEqual(sender.message_id(result), "SM1234567890")
        mock_client.messages.create.assert_called_once_with(
            body="Halo Budi",
            from_="whatsapp:+14155238886",
            to="whatsapp:+6281234567890",
        )

    @patch('submissions.channels.whatsapp_handler.Client')
    def test_invalid_number(self, mock_client_class):
        mock_client = MagicMock()
        mock_client.messages.create.side_effect = TwilioRestException(400, 'uri', msg='Invalid number', code=21211)
        mock_client_class.return_value = mock_client

        result = async_to_sync(TwilioWhatsAppSender(self.credentials).send)("+6281234567890", {"body": "x"}, CONTEXT)

        self.assertFalse(result['success'])
        self.assertEqual(result['error'], 'invalid_number')

    @patch('submissions.channels.whatsapp_handler.Client')
    def test_unexpected_error_is_reported(self, mock_client_class):
        mock_client_class.return_value.messages.create.side_effect = RuntimeError('network down')

        result = async_to_sync(TwilioWhatsAppSender(self.credentials).send)("+6281234567890", {"body": "x"}, CONTEXT)

        self.assertFalse(result['success'])
        self.assertIn('network down', result['error'])


class SiCubaWhatsAppSenderTest(TestCase):

    def setUp(self):
        self.sender = SiCubaWhatsAppSender({
            'api_url': 'https://sicuba.test/api/sendMessage',
            'api_token': 'test-sicuba-token',
            'campaign_id': 'test-campaign',
        })

    def _response(self, status_code=200, body=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        response.json.return_value = body if body is not None else [{'customer_id': 'cust-1', 'status': 'queued'}]
        return response

    def test_send_success(self):
        with patch.object(self.sender.session, 'post', return_value=self._response()) as mock_post:
            result = async_to_sync(self.sender.send)('+6281234567890', {'body': 'ignored'}, CONTEXT)

        self.assertTrue(result['success'])
        self.assertEqual(self.sender.message_id(result), 'cust-1')
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://sicuba.test/api/sendMessage')
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer test-sicuba-token')
        body = kwargs['json'][0]
        self.assertEqual(body['phone'], '6281234567890')
        self.assertEqual(body['campaign_id'], 'test-campaign')
        self.assertEqual(body['name'], 'Budi Santoso')
        self.assertEqual(body['tracking_code'], 'LP-20250101-00001')
        self.assertEqual(body['status'], 'Sedang Diproses')

    def test_api_error(self):
        with patch.object(self.sender.session, 'post', return_value=self._response(401, {'message': 'Unauthorized'})):
            result = async_to_sync(self.sender.send)('+6281234567890', {}, CONTEXT)

        self.assertFalse(result['success'])
        self.assertIn('401', result['error'])

    def test_network_error(self):
        with patch.object(self.sender.session, 'post', side_effect=requests.ConnectionError('refused')):
            result = async_to_sync(self.sender.send)('+6281234567890', {}, CONTEXT)

        self.assertFalse(result['success'])
        self.assertIn('refused', result['error'])


class EmailSenderTest(TestCase):

    def test_send_renders_html_and_text(self):
        sender = EmailSender({'from_email': 'noreply@layanan.test'})
        content = {
            'subject': 'Update Status Pengajuan - LP-20250101-00001',
            'body': 'Halo Budi Santoso',
            'heading': 'Update Status Pengajuan',
            'intro': 'Status pengajuan layanan Anda telah diperbarui:',
        }

        result = async_to_sync(sender.send)('budi@example.com', content, CONTEXT)

        self.assertTrue(result['success'])
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ['budi@example.com'])
        self.assertEqual(message.from_email, 'noreply@layanan.test')
        self.assertEqual(message.subject, 'Update Status Pengajuan - LP-20250101-00001')
        self.assertEqual(message.body, 'Halo Budi Santoso')
        html, mimetype = message.alternatives[0]
        self.assertEqual(mimetype, 'text/html')
        self.assertIn('Sedang Diproses', html)
        self.assertIn(CONTEXT['tracking_url'].replace('&', '&amp;'), html)

    @patch('submissions.channels.email_handler.EmailMultiAlternatives')
    def test_send_failure(self, mock_email_class):
        mock_email_class.return_value.send.side_effect = Exception("SMTP connection failed")

        result = async_to_sync(EmailSender().send)('budi@example.com', {'subject': 's', 'body': 'b'}, CONTEXT)

        self.assertFalse(result['success'])
        self.assertIn("SMTP connection failed", result['error'])

    @patch('submissions.channels.email_handler.EmailMultiAlternatives')
    def test_zero_sent_is_failure(self, mock_email_class):
        mock_email_class.return_value.send.return_value = 0

        result = async_to_sync(EmailSender().send)('budi@example.com', {'subject': 's', 'body': 'b'}, CONTEXT)

        self.assertFalse(result['success'])


def test_console_sender_always_succeeds():
    result = async_to_sync(ConsoleWhatsAppSender().send)('+6281234567890', {'body': 'Halo'}, CONTEXT)
    assert result['success']
    assert result['response']['sid'].startswith('console-')


def test_registry_builds_configured_provider(settings):
    settings.WHATSAPP_PROVIDER = 'console'
    assert isinstance(get_whatsapp_sender(), ConsoleWhatsAppSender)

    twilio_sender = get_whatsapp_sender('twilio')
    assert isinstance(twilio_sender, TwilioWhatsAppSender)
    assert twilio_sender.credentials['account_sid'] == 'ACtest1234567890'

    sicuba_sender = get_whatsapp_sender('SiCuba')
    assert isinstance(sicuba_sender, SiCubaWhatsAppSender)
    assert sicuba_sender.credentials['campaign_id'] == 'test-campaign'

    assert isinstance(get_email_sender(), EmailSender)


def test_registry_rejects_unknown_provider():
    with pytest.raises(ImproperlyConfigured):
        get_whatsapp_sender('pigeon')


def test_twilio_client_is_created_lazily(mock_twilio_client):
    sender = TwilioWhatsAppSender({'account_sid': 'AC1', 'auth_token': 't', 'from_number': 'whatsapp:+1'})
    assert sender._client is None
    result = async_to_sync(sender.send)('+6281234567890', {'body': 'Halo'}, CONTEXT)
    assert result['success']
    assert mock_twilio_client.messages.create.call_args.kwargs['from_'] == 'whatsapp:+1'
