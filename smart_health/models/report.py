from dataclasses import dataclass
from datetime import datetime

from smart_health.models.base import FirestoreModel


@dataclass
class MedicalReport(FirestoreModel):
    patient_id: str | None = None
    patient_email: str | None = None
    appointment_id: str | None = None

    # fileName is the object key inside the bucket: {patientId}/{appointmentId|general}/{ts}_{name}
    file_name: str | None = None
    original_name: str | None = None
    file_size: int | None = None
    mime_type: str | None = None
    storage_path: str | None = None
    status: str = "uploaded"

    # AI output: structured analysis (summary/explanation/suggestions/disclaimer) and free text
    ai_analysis: dict | None = None
    ai_explanation: str | None = None

    uploaded_at: datetime | None = None

    def __repr__(self):
        return f"<MedicalReport {self.id} of {self.patient_id}>"
