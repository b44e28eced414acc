from dataclasses import dataclass
from datetime import datetime

from smart_health.models.base import FirestoreModel

CONSENT_APPROVED = "approved"
CONSENT_REVOKED = "revoked"


def consent_id_for(patient_id: str, doctor_id: str, appointment_id: str) -> str:
    # One consent document per appointment, so re-granting overwrites instead of duplicating
    return f"{patient_id}_{doctor_id}_{appointment_id}"


@dataclass
class Consent(FirestoreModel):
    patient_id: str | None = None
    doctor_id: str | None = None
    appointment_id: str | None = None
    status: str | None = None
    granted_at: datetime | None = None
    revoked_at: datetime | None = None
