from dataclasses import dataclass


@dataclass
class Services:
    store: object
    dispatcher: object
    lifecycle: object
    lookup: object


def build_services(store=None, whatsapp_sender=None, email_sender=None, timeout=None) -> Services:
    """Wire the submission core once per process. Arguments override the configured collaborators."""
    from submissions.channels import get_email_sender, get_whatsapp_sender
    from submissions.orchestrator.dispatcher import NotificationDispatcher
    from submissions.services.lifecycle import SubmissionLifecycle
    from submissions.services.lookup import StatusLookupService
    from submissions.store import SubmissionStore

    store = store or SubmissionStore()
    dispatcher = NotificationDispatcher(
        store,
        whatsapp_sender or get_whatsapp_sender(),
        email_sender or get_email_sender(),
        timeout=timeout,
    )
    return Services(
        store=store,
        dispatcher=dispatcher,
        lifecycle=SubmissionLifecycle(store, dispatcher),
        lookup=StatusLookupService(store),
    )
