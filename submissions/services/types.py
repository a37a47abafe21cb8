from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class SubmissionInput:
    """Validated, normalized request data. Only built from a valid serializer."""
    nama: str
    nik: str
    no_wa: str
    jenis_layanan: str
    email: Optional[str] = None


@dataclass(frozen=True)
class DeliveryOutcome:
    channel: str
    send_status: str
    destination: str
    provider: str
    message_id: Optional[str] = None
    error: Optional[str] = None
    timed_out: bool = False
    logged: bool = True

    @property
    def succeeded(self) -> bool:
        return self.send_status == 'SUCCESS'


@dataclass(frozen=True)
class DispatchResult:
    whatsapp: DeliveryOutcome
    email: Optional[DeliveryOutcome] = None

    @property
    def outcomes(self) -> List[DeliveryOutcome]:
        return [outcome for outcome in (self.whatsapp, self.email) if outcome is not None]


@dataclass(frozen=True)
class CreationResult:
    tracking_code: str
    submission_id: str
    notifications: DispatchResult


@dataclass(frozen=True)
class TransitionResult:
    submission_id: str
    old_status: str
    new_status: str
    notifications: DispatchResult


@dataclass(frozen=True)
class BulkTransitionResult:
    new_status: str
    updated: List[TransitionResult] = field(default_factory=list)
    failed: List[dict] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated)


@dataclass(frozen=True)
class RedactedSubmissionView:
    """What the public status check may reveal. No NIK, phone or email."""
    nama: str
    jenis_layanan: str
    tracking_code: str
    status: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_submission(cls, submission) -> 'RedactedSubmissionView':
        return cls(
            nama=submission.nama,
            jenis_layanan=submission.jenis_layanan,
            tracking_code=submission.tracking_code,
            status=submission.status,
            created_at=submission.created_at,
            updated_at=submission.updated_at,
        )
