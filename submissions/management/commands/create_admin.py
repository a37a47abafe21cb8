import logging
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

logger = logging.getLogger('submissions.management')


class Command(BaseCommand):
    help = 'Create a staff account for the admin dashboard, or reset the password of an existing one'

    def add_arguments(self, parser):
        parser.add_argument('--username', default='admin', help='Login username')
        parser.add_argument('--email', default='', help='Contact email for the account')
        parser.add_argument('--password', required=True, help='Password to set')
        parser.add_argument(
            '--superuser',
            action='store_true',
            help='Also grant Django superuser rights'
        )

    def handle(self, *args, **options):
        username = options['username'].strip()
        password = options['password']
        if not username:
            raise CommandError('Username must not be empty')
        if len(password) < 8:
            raise CommandError('Password must be at least 8 characters')

        User = get_user_model()
        user, created = User.objects.get_or_create(username=username, defaults={'email': options['email']})
        if options['email']:
            user.email = options['email']
        user.is_staff = True
        user.is_active = True
        if options['superuser']:
            user.is_superuser = True
        user.set_password(password)
        user.save()

        if created:
            logger.info(f"Admin account created: {username}")
            self.stdout.write(self.style.SUCCESS(f'Admin user "{username}" created'))
        else:
            logger.info(f"Admin account updated: {username}")
            self.stdout.write(self.style.SUCCESS(f'Admin user "{username}" already existed; password and staff flag updated'))
