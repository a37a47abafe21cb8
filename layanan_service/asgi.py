import os
import logging

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'layanan_service.settings')

logger = logging.getLogger('submissions.bootstrap')

application = get_asgi_application()


def _prepare_store():
    """Verify the submission store once per process, before the first request."""
    from asgiref.sync import async_to_sync
    from django.apps import apps

    services = apps.get_app_config('submissions').services
    async_to_sync(services.store.ensure_ready)()
    logger.info("Submission store ready")


_prepare_store()
