from .base_handler import BaseChannelSender
from asgiref.sync import sync_to_async
from submissions.models import Channel
import requests
import logging
import uuid

from twilio.rest import Client
from twilio.base.exceptions import TwilioException, TwilioRestException

logger = logging.getLogger('submissions.channels.whatsapp')


def _whatsapp_address(phone: str) -> str:
    return phone if phone.startswith('whatsapp:') else f'whatsapp:{phone}'


class TwilioWhatsAppSender(BaseChannelSender):
    """
    WhatsApp notification sender using the Twilio API
    """
    channel = Channel.WHATSAPP
    provider = 'twilio'

    def __init__(self, credentials: dict):
        super().__init__(credentials)
        self._client = None

    def _get_twilio_client(self):
        """Get or create Twilio client instance"""
        if self._client is None:
            self._client = Client(self.credentials['account_sid'], self.credentials['auth_token'])
            logger.info("Initialized Twilio client")
        return self._client

    async def send(self, recipient: str, content: dict, context: dict) -> dict:
        """
        Send a WhatsApp message to a single recipient

        Args:
            recipient: Phone number in canonical +62 form
            content: Rendered content, uses 'body'
            context: Template context (unused by Twilio)

        Returns:
            dict: Success status and response
        """
        try:
            client = self._get_twilio_client()
            message = await sync_to_async(client.messages.create, thread_sensitive=False)(
                body=content['body'],
                from_=_whatsapp_address(self.credentials['from_number']),
                to=_whatsapp_address(recipient),
            )

            logger.info(f"WhatsApp sent successfully via Twilio: {message.sid}")
            return {
                'success': True,
                'response': {
                    'sid': message.sid,
                    'status': message.status,
                    'recipient': recipient
                }
            }

        except TwilioRestException as e:
            if e.code == 21211:
                logger.error(f"Invalid WhatsApp number: {recipient}")
                return {'success': False, 'error': 'invalid_number', 'code': e.code, 'response': None}
            elif e.code == 20003:
                logger.error("Twilio authentication error")
                return {'success': False, 'error': 'auth_error', 'code': e.code, 'response': None}
            logger.error(f"Twilio error sending to {recipient}: {str(e)}")
            return {'success': False, 'error': f'provider_error: {e.msg}', 'code': e.code, 'response': None}

        except TwilioException as e:
            logger.error(f"Twilio error sending to {recipient}: {str(e)}")
            return {'success': False, 'error': f'provider_error: {str(e)}', 'response': None}

        except Exception as e:
            logger.error(f"WhatsApp send error to {recipient}: {str(e)}")
            return {'success': False, 'error': str(e), 'response': None}


class SiCubaWhatsAppSender(BaseChannelSender):
    """
    WhatsApp notification sender using a SiCuba campaign.

    SiCuba renders the message from its campaign template, so the context is
    passed as custom fields rather than as a message body.
    """
    channel = Channel.WHATSAPP
    provider = 'sicuba'

    def __init__(self, credentials: dict):
        super().__init__(credentials)
        self.session = requests.Session()
        self.timeout = credentials.get('timeout', 10)

    def _get_headers(self) -> dict:
        return {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {self.credentials['api_token']}",
            'User-Agent': 'LayananPublik/1.0'
        }

    async def send(self, recipient: str, content: dict, context: dict) -> dict:
        # SiCuba rejects the leading '+'
        phone = recipient.lstrip('+')
        body = [{
            'campaign_id': self.credentials['campaign_id'],
            'phone': phone,
            'name': context.get('nama', ''),
            'tracking_code': context.get('tracking_code', ''),
            'jenis_layanan': context.get('jenis_layanan', ''),
            'status': context.get('status', ''),
            'tracking_url': context.get('tracking_url', ''),
        }]
        try:
            logger.info(f"Sending WhatsApp via SiCuba to {phone}")
            response = await sync_to_async(self.session.post, thread_sensitive=False)(
                self.credentials['api_url'],
                json=body,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            result = response.json()

            if not response.ok:
                logger.error(f"SiCuba API error {response.status_code}: {result}")
                return {'success': False, 'error': f'SiCuba API error: {response.status_code} - {result}', 'response': result}

            first = result[0] if isinstance(result, list) and result else {}
            logger.info(f"SiCuba WhatsApp message accepted for {phone}")
            return {
                'success': True,
                'response': {
                    'message_id': first.get('customer_id', 'unknown'),
                    'status': first.get('status', 'sent'),
                    'raw': result
                }
            }

        except (requests.RequestException, ValueError) as e:
            logger.error(f"SiCuba send error to {phone}: {str(e)}")
            return {'success': False, 'error': str(e), 'response': None}


class ConsoleWhatsAppSender(BaseChannelSender):
    """Writes WhatsApp messages to the log instead of sending them. For local development."""
    channel = Channel.WHATSAPP
    provider = 'console'

    async def send(self, recipient: str, content: dict, context: dict) -> dict:
        logger.info(f"[console] WhatsApp to {recipient}: {content.get('body', '')}")
        return {
            'success': True,
            'response': {'sid': f'console-{uuid.uuid4().hex[:12]}', 'status': 'logged', 'recipient': recipient}
        }
