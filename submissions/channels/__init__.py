import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from .base_handler import BaseChannelSender
from .email_handler import EmailSender
from .whatsapp_handler import ConsoleWhatsAppSender, SiCubaWhatsAppSender, TwilioWhatsAppSender

logger = logging.getLogger('submissions.channels')

WHATSAPP_SENDERS = {
    'twilio': TwilioWhatsAppSender,
    'sicuba': SiCubaWhatsAppSender,
    'console': ConsoleWhatsAppSender,
}


def _whatsapp_credentials(provider: str) -> dict:
    if provider == 'twilio':
        return {
            'account_sid': settings.TWILIO_ACCOUNT_SID,
            'auth_token': settings.TWILIO_AUTH_TOKEN,
            'from_number': settings.TWILIO_WHATSAPP_FROM,
        }
    if provider == 'sicuba':
        return {
            'api_url': settings.SICUBA_API_URL,
            'api_token': settings.SICUBA_API_TOKEN,
            'campaign_id': settings.SICUBA_CAMPAIGN_ID,
            'timeout': settings.NOTIFICATION_SEND_TIMEOUT,
        }
    return {}


def get_whatsapp_sender(provider: str = None) -> BaseChannelSender:
    """Build the WhatsApp sender for ``provider`` (defaults to WHATSAPP_PROVIDER)."""
    provider = (provider or settings.WHATSAPP_PROVIDER).lower()
    try:
        sender_class = WHATSAPP_SENDERS[provider]
    except KeyError:
        raise ImproperlyConfigured(
            f"Unknown WHATSAPP_PROVIDER '{provider}', expected one of {', '.join(WHATSAPP_SENDERS)}"
        )
    logger.info(f"Using WhatsApp provider: {provider}")
    return sender_class(_whatsapp_credentials(provider))


def get_email_sender() -> BaseChannelSender:
    return EmailSender({'from_email': settings.DEFAULT_FROM_EMAIL})


__all__ = [
    'BaseChannelSender', 'EmailSender', 'TwilioWhatsAppSender', 'SiCubaWhatsAppSender',
    'ConsoleWhatsAppSender', 'WHATSAPP_SENDERS', 'get_whatsapp_sender', 'get_email_sender',
]
