"""
Notification dispatcher.

Fans one submission event out to the WhatsApp and email senders and records a
NotificationLog per attempted channel. Delivery problems are recorded, never
raised: a failed notification must not undo the submission change that caused
it.
"""
import asyncio
import logging
from typing import Optional

from django.conf import settings

from submissions.channels.base_handler import BaseChannelSender
from submissions.models import Channel, SendStatus
from submissions.orchestrator.messages import (
    EVENT_CREATED, EVENT_STATUS_CHANGED, build_context, render_content,
)
from submissions.services.types import DeliveryOutcome, DispatchResult
from submissions.utils.exceptions import ChannelSendFailure

logger = logging.getLogger('submissions.dispatcher')


class NotificationDispatcher:

    def __init__(self, store, whatsapp_sender: BaseChannelSender, email_sender: BaseChannelSender,
                 timeout: Optional[float] = None):
        self.store = store
        self.whatsapp_sender = whatsapp_sender
        self.email_sender = email_sender
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_SEND_TIMEOUT

    async def notify_created(self, submission) -> DispatchResult:
        return await self._dispatch(EVENT_CREATED, submission, submission.status)

    async def notify_status_changed(self, submission, new_status: str) -> DispatchResult:
        return await self._dispatch(EVENT_STATUS_CHANGED, submission, new_status)

    async def _dispatch(self, event: str, submission, status: str) -> DispatchResult:
        context = build_context(submission, status)
        attempts = [
            self._deliver(event, submission, Channel.WHATSAPP, self.whatsapp_sender, submission.no_wa, context),
        ]
        # Email is optional on submissions; no address means no attempt and no log
        if submission.email:
            attempts.append(
                self._deliver(event, submission, Channel.EMAIL, self.email_sender, submission.email, context)
            )

        outcomes = await asyncio.gather(*attempts)
        result = DispatchResult(whatsapp=outcomes[0], email=outcomes[1] if len(outcomes) > 1 else None)
        logger.info(
            f"Dispatched '{event}' for {submission.tracking_code}: "
            + ', '.join(f"{o.channel}={o.send_status}" for o in result.outcomes)
        )
        return result

    async def _attempt(self, sender: BaseChannelSender, destination: str, content: dict, context: dict) -> dict:
        try:
            result = await asyncio.wait_for(sender.send(destination, content, context), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ChannelSendFailure(f"Timed out after {self.timeout}s", errors={'timeout': True})
        if not result.get('success'):
            raise ChannelSendFailure(str(result.get('error') or 'Send failed'), errors={'response': result.get('response')})
        return result

    async def _deliver(self, event: str, submission, channel: Channel, sender: BaseChannelSender,
                       destination: str, context: dict) -> DeliveryOutcome:
        content = render_content(event, channel.value.lower(), context)
        payload = {
            'event': event,
            'destination': destination,
            'provider': sender.provider,
            'status_label': context['status'],
            'message': content.get('body', ''),
            'timeout': False,
        }
        if 'subject' in content:
            payload['subject'] = content['subject']

        message_id = None
        error = None
        try:
            result = await self._attempt(sender, destination, content, context)
            message_id = sender.message_id(result)
            payload['response'] = result.get('response')
            send_status = SendStatus.SUCCESS
        except ChannelSendFailure as e:
            error = e.message
            payload['error'] = error
            payload['timeout'] = bool(e.errors.get('timeout'))
            if e.errors.get('response') is not None:
                payload['response'] = e.errors['response']
            send_status = SendStatus.FAILED
            logger.warning(f"{channel.value} notification for {submission.tracking_code} failed: {error}")
        except Exception as e:
            error = str(e) or e.__class__.__name__
            payload['error'] = error
            send_status = SendStatus.FAILED
            logger.error(f"{channel.value} sender raised for {submission.tracking_code}: {error}", exc_info=True)

        logged = True
        try:
            await self.store.log_notification(submission.id, channel.value, send_status.value, payload)
        except Exception as e:
            logged = False
            logger.error(f"Could not record {channel.value} notification log for {submission.tracking_code}: {str(e)}")

        return DeliveryOutcome(
            channel=channel.value,
            send_status=send_status.value,
            destination=destination,
            provider=sender.provider,
            message_id=message_id,
            error=error,
            timed_out=payload['timeout'],
            logged=logged,
        )
