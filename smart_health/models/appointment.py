from dataclasses import dataclass
from datetime import datetime, timedelta

from smart_health.models.base import FirestoreModel

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
DOCTOR_DECISIONS = {STATUS_ACCEPTED, STATUS_REJECTED}


@dataclass
class Appointment(FirestoreModel):
    patient_id: str | None = None
    doctor_id: str | None = None
    date: str | None = None   # YYYY-MM-DD
    time: str | None = None   # HH:MM
    reason: str | None = None

    # 'pending' (requested), 'accepted' / 'rejected' (doctor decision)
    status: str = STATUS_PENDING

    # Mirrors the consents/{id} record, set by the patient only
    consent_granted: bool = False
    doctor_notes: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def starts_at(self) -> datetime | None:
        if not self.date or not self.time:
            return None
        try:
            return datetime.fromisoformat(f"{self.date}T{self.time}")
        except ValueError:
            return None

    def ends_at(self, duration: timedelta = timedelta(0)) -> datetime | None:
        start = self.starts_at()
        return start + duration if start else None

    def __repr__(self):
        return f"<Appointment {self.id} {self.date} {self.time} [{self.status}]>"
