from dataclasses import fields

from asgiref.sync import async_to_sync
from django.test import TestCase

from submissions.models import Channel
from submissions.services import build_services
from submissions.services.lookup import LOOKUP_FAILED_MESSAGE, StatusLookupService
from submissions.services.types import RedactedSubmissionView
from submissions.store import SubmissionStore
from submissions.utils.exceptions import ForbiddenError, InputValidationError, NotFoundError
from tests.helpers import FakeSender, create_submission, submission_payload


class StatusLookupServiceTest(TestCase):

    def setUp(self):
        self.lookup = StatusLookupService(SubmissionStore())
        self.submission = create_submission(status='DIPROSES')

    def test_matching_code_and_nik(self):
        view = async_to_sync(self.lookup.check)('LP-20250101-00001', '1234')

        self.assertIsInstance(view, RedactedSubmissionView)
        self.assertEqual(view.tracking_code, 'LP-20250101-00001')
        self.assertEqual(view.status, 'DIPROSES')
        self.assertEqual(view.nama, 'Budi Santoso')
        self.assertEqual(view.jenis_layanan, 'KTP')

    def test_view_exposes_no_private_fields(self):
        self.assertEqual(
            [f.name for f in fields(RedactedSubmissionView)],
            ['nama', 'jenis_layanan', 'tracking_code', 'status', 'created_at', 'updated_at'],
        )

    def test_unknown_code(self):
        with self.assertRaises(NotFoundError) as ctx:
            async_to_sync(self.lookup.check)('LP-19990101-00000', '1234')
        self.assertEqual(ctx.exception.message, LOOKUP_FAILED_MESSAGE)

    def test_wrong_last4(self):
        with self.assertRaises(ForbiddenError) as ctx:
            async_to_sync(self.lookup.check)('LP-20250101-00001', '9999')
        self.assertEqual(ctx.exception.message, LOOKUP_FAILED_MESSAGE)

    def test_not_found_and_forbidden_are_indistinguishable_by_message(self):
        messages = []
        for code, last4 in [('LP-19990101-00000', '1234'), ('LP-20250101-00001', '0000')]:
            try:
                async_to_sync(self.lookup.check)(code, last4)
            except (NotFoundError, ForbiddenError) as e:
                messages.append(e.message)
        self.assertEqual(len(set(messages)), 1)

    def test_malformed_input(self):
        for code, last4 in [('', '1234'), ('LP-20250101-00001', '123'), ('LP-20250101-00001', 'abcd'),
                            ('LP-20250101-00001', '12345'), ('LP-20250101-00001', None)]:
            with self.assertRaises(InputValidationError):
                async_to_sync(self.lookup.check)(code, last4)

    def test_surrounding_whitespace_ignored(self):
        view = async_to_sync(self.lookup.check)('  LP-20250101-00001 ', ' 1234 ')
        self.assertEqual(view.tracking_code, 'LP-20250101-00001')

    def test_non_ascii_last4_rejected(self):
        with self.assertRaises(InputValidationError):
            async_to_sync(self.lookup.check)('LP-20250101-00001', '١٢٣٤')


class CreateThenLookupTest(TestCase):

    def setUp(self):
        self.services = build_services(
            whatsapp_sender=FakeSender(Channel.WHATSAPP),
            email_sender=FakeSender(Channel.EMAIL, result={'success': True, 'response': {'sent': 1}}),
            timeout=0.5,
        )

    def test_created_submission_is_found_by_its_code_and_nik(self):
        payload = submission_payload()
        created = async_to_sync(self.services.lifecycle.create)(payload)

        view = async_to_sync(self.services.lookup.check)(created.tracking_code, payload['nik'][-4:])

        self.assertEqual(view.tracking_code, created.tracking_code)
        self.assertEqual(view.status, 'PENGAJUAN_BARU')
        self.assertEqual(view.nama, payload['nama'])
