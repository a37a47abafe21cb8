from django.apps import AppConfig


class SubmissionsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'submissions'
    verbose_name = 'Pengajuan Layanan'

    def ready(self):
        # Wire store, channel senders and use cases once per process
        from submissions.services import build_services
        self.services = build_services()
