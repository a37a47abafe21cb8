import json
from asgiref.sync import async_to_sync
from django.apps import apps
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone
from submissions.utils.exceptions import NotFoundError


class Command(BaseCommand):
    help = 'Show recent notification attempts and a per-channel delivery summary'

    def add_arguments(self, parser):
        parser.add_argument(
            '--tracking-code',
            default=None,
            help='Only show notifications for this submission'
        )
        parser.add_argument(
            '--limit',
            type=int,
            default=20,
            help='Number of recent notifications to list (0 for summary only)'
        )

    def handle(self, *args, **options):
        store = apps.get_app_config('submissions').services.store

        submission_id = None
        if options['tracking_code']:
            try:
                submission = async_to_sync(store.find_by_tracking_code)(options['tracking_code'])
            except NotFoundError:
                raise CommandError(f"No submission with tracking code {options['tracking_code']}")
            submission_id = submission.id

        logs = async_to_sync(store.list_notification_logs)(submission_id)
        self.stdout.write(f'Total notifications: {len(logs)}')
        if not logs:
            self.stdout.write(self.style.WARNING('No notifications found'))
            return

        for index, log in enumerate(logs[:max(options['limit'], 0)], start=1):
            self.stdout.write(f'{index}. {log.id}')
            self.stdout.write(f'   Submission: {log.submission.nama} ({log.submission.tracking_code})')
            self.stdout.write(f'   Channel: {log.channel}  Status: {log.send_status}')
            self.stdout.write(f"   Sent to: {log.payload.get('destination', '-')}")
            self.stdout.write(f'   Created: {timezone.localtime(log.created_at):%Y-%m-%d %H:%M:%S}')
            if log.payload.get('error'):
                self.stdout.write(f"   Error: {log.payload['error']}")
            elif log.payload.get('response'):
                self.stdout.write(f"   Response: {json.dumps(log.payload['response'], default=str)}")

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('Summary:'))
        for channel in sorted({log.channel for log in logs}):
            channel_logs = [log for log in logs if log.channel == channel]
            succeeded = sum(1 for log in channel_logs if log.send_status == 'SUCCESS')
            self.stdout.write(f'   {channel}: {succeeded}/{len(channel_logs)} successful')
