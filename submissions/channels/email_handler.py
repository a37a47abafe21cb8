from .base_handler import BaseChannelSender
from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string
from submissions.models import Channel
import logging

logger = logging.getLogger('submissions.channels.email')

DEFAULT_HTML_TEMPLATE = 'email/submission_status.html'


class EmailSender(BaseChannelSender):
    """
    Email notification sender using Django's mail framework.

    The configured EMAIL_BACKEND is used; credentials, when given, override the
    SMTP host settings for this sender only.
    """
    channel = Channel.EMAIL
    provider = 'django-mail'

    def _get_connection(self):
        creds = self.credentials
        if not creds.get('smtp_host'):
            return get_connection(fail_silently=False)
        return get_connection(
            backend='django.core.mail.backends.smtp.EmailBackend',
            host=creds.get('smtp_host'),
            port=creds.get('smtp_port'),
            username=creds.get('username'),
            password=creds.get('password'),
            use_ssl=creds.get('use_ssl', False),
            use_tls=creds.get('use_tls', False),
            timeout=creds.get('timeout', 20),
            fail_silently=False,
        )

    def _render_html_template(self, content: dict, context: dict) -> str:
        template_name = content.get('html_template', DEFAULT_HTML_TEMPLATE)
        return render_to_string(template_name, {**context, **content})

    async def send(self, recipient: str, content: dict, context: dict) -> dict:
        try:
            subject = content.get('subject', '')
            body_text = content.get('body', '')
            html_body = self._render_html_template(content, context)
            from_email = self.credentials.get('from_email') or settings.DEFAULT_FROM_EMAIL

            logger.info(f"Sending email to {recipient} with subject '{subject}'")
            email = EmailMultiAlternatives(
                subject=subject,
                body=body_text,
                from_email=from_email,
                to=[recipient],
                connection=self._get_connection(),
            )
            email.attach_alternative(html_body, "text/html")
            sent = await sync_to_async(email.send, thread_sensitive=False)(fail_silently=False)

            if sent:
                logger.info(f"Email sent successfully to {recipient}")
                return {'success': True, 'response': {'sent': sent, 'recipient': recipient}}
            logger.warning(f"Email send returned 0 for {recipient}")
            return {'success': False, 'error': 'Send failed', 'response': None}

        except Exception as e:
            logger.error(f"Email send error to {recipient}: {str(e)}")
            return {'success': False, 'error': str(e), 'response': None}
