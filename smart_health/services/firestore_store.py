import logging

from firebase_admin import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from smart_health.models.appointment import Appointment
from smart_health.models.consent import CONSENT_APPROVED, CONSENT_REVOKED, Consent, consent_id_for
from smart_health.models.health_reading import HealthReading
from smart_health.models.report import MedicalReport
from smart_health.models.user import User

logger = logging.getLogger(__name__)

# =========================
# COLLECTIONS
# =========================
USERS = "users"
APPOINTMENTS = "appointments"
REPORTS = "medicalReports"
CONSENTS = "consents"
HEALTH_READINGS = "health-readings"
DIET_PLANS = "dietPlans"
EXERCISE_PLANS = "exercisePlans"


def _newest_first(items, attr):
    # Sorted in Python so no composite index is needed next to the equality filter
    return sorted(
        items,
        key=lambda item: (getattr(item, attr) is not None, getattr(item, attr)),
        reverse=True,
    )


class FirestoreStore:
    """All Firestore reads/writes of the app go through here."""

    def __init__(self, client):
        self.db = client

    # ---------- users ----------
    def get_user(self, uid: str) -> User | None:
        snap = self.db.collection(USERS).document(uid).get()
        if not snap.exists:
            return None
        return User.from_doc(snap.id, snap.to_dict())

    def get_user_role(self, uid: str) -> str | None:
        user = self.get_user(uid)
        return user.role if user else None

    def create_user(self, user: User) -> User:
        data = user.to_dict(skip_none=True)
        data["createdAt"] = firestore.SERVER_TIMESTAMP
        self.db.collection(USERS).document(user.id).set(data)
        return user

    def merge_user(self, uid: str, fields: dict) -> None:
        data = dict(fields, updatedAt=firestore.SERVER_TIMESTAMP)
        self.db.collection(USERS).document(uid).set(data, merge=True)

    # ---------- appointments ----------
    def create_appointment(self, appointment: Appointment) -> Appointment:
        ref = self.db.collection(APPOINTMENTS).document()
        data = appointment.to_dict()
        data["createdAt"] = firestore.SERVER_TIMESTAMP
        ref.set(data)
        appointment.id = ref.id
        return appointment

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        snap = self.db.collection(APPOINTMENTS).document(appointment_id).get()
        if not snap.exists:
            return None
        return Appointment.from_doc(snap.id, snap.to_dict())

    def update_appointment(self, appointment_id: str, fields: dict) -> None:
        data = dict(fields, updatedAt=firestore.SERVER_TIMESTAMP)
        self.db.collection(APPOINTMENTS).document(appointment_id).update(data)

    def list_appointments(self, *, patient_id: str = None, doctor_id: str = None) -> list[Appointment]:
        query = self.db.collection(APPOINTMENTS)
        if patient_id:
            query = query.where(filter=FieldFilter("patientId", "==", patient_id))
        if doctor_id:
            query = query.where(filter=FieldFilter("doctorId", "==", doctor_id))
        return [Appointment.from_doc(s.id, s.to_dict()) for s in query.stream()]

    # ---------- consents ----------
    def find_consents(self, patient_id: str, doctor_id: str, status: str = CONSENT_APPROVED) -> list[Consent]:
        query = (
            self.db.collection(CONSENTS)
            .where(filter=FieldFilter("patientId", "==", patient_id))
            .where(filter=FieldFilter("doctorId", "==", doctor_id))
            .where(filter=FieldFilter("status", "==", status))
        )
        return [Consent.from_doc(s.id, s.to_dict()) for s in query.stream()]

    def approve_consent(self, appointment: Appointment) -> Consent:
        consent = Consent(
            id=consent_id_for(appointment.patient_id, appointment.doctor_id, appointment.id),
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            appointment_id=appointment.id,
            status=CONSENT_APPROVED,
        )
        data = consent.to_dict(skip_none=True)
        data["grantedAt"] = firestore.SERVER_TIMESTAMP
        data["revokedAt"] = None

        batch = self.db.batch()
        batch.set(self.db.collection(CONSENTS).document(consent.id), data, merge=True)
        batch.update(
            self.db.collection(APPOINTMENTS).document(appointment.id),
            {"consentGranted": True, "updatedAt": firestore.SERVER_TIMESTAMP},
        )
        batch.commit()
        return consent

    def revoke_consent(self, appointment: Appointment) -> None:
        consent_id = consent_id_for(appointment.patient_id, appointment.doctor_id, appointment.id)
        batch = self.db.batch()
        batch.set(
            self.db.collection(CONSENTS).document(consent_id),
            {
                "patientId": appointment.patient_id,
                "doctorId": appointment.doctor_id,
                "appointmentId": appointment.id,
                "status": CONSENT_REVOKED,
                "revokedAt": firestore.SERVER_TIMESTAMP,
            },
            merge=True,
        )
        batch.update(
            self.db.collection(APPOINTMENTS).document(appointment.id),
            {"consentGranted": False, "updatedAt": firestore.SERVER_TIMESTAMP},
        )
        batch.commit()

    # ---------- medical reports ----------
    def add_report(self, report: MedicalReport) -> MedicalReport:
        ref = self.db.collection(REPORTS).document()
        report.id = ref.id
        data = report.to_dict()
        data["id"] = ref.id
        data["uploadedAt"] = firestore.SERVER_TIMESTAMP
        ref.set(data)
        return report

    def get_report(self, report_id: str) -> MedicalReport | None:
        snap = self.db.collection(REPORTS).document(report_id).get()
        if not snap.exists:
            return None
        data = snap.to_dict()
        data.pop("id", None)
        return MedicalReport.from_doc(snap.id, data)

    def list_reports(self, patient_id: str) -> list[MedicalReport]:
        query = self.db.collection(REPORTS).where(filter=FieldFilter("patientId", "==", patient_id))
        reports = []
        for snap in query.stream():
            data = snap.to_dict()
            data.pop("id", None)
            reports.append(MedicalReport.from_doc(snap.id, data))
        return _newest_first(reports, "uploaded_at")

    def update_report(self, report_id: str, fields: dict) -> None:
        self.db.collection(REPORTS).document(report_id).update(fields)

    def delete_report(self, report_id: str) -> None:
        self.db.collection(REPORTS).document(report_id).delete()

    # ---------- health readings ----------
    def add_health_reading(self, uid: str, reading: HealthReading) -> HealthReading:
        ref = self.db.collection(USERS).document(uid).collection(HEALTH_READINGS).document()
        data = reading.to_dict(skip_none=True)
        data["timestamp"] = firestore.SERVER_TIMESTAMP
        ref.set(data)
        reading.id = ref.id
        return reading

    def list_health_readings(self, uid: str, reading_type: str = None) -> list[HealthReading]:
        query = self.db.collection(USERS).document(uid).collection(HEALTH_READINGS)
        if reading_type:
            query = query.where(filter=FieldFilter("type", "==", reading_type))
        readings = [HealthReading.from_doc(s.id, s.to_dict()) for s in query.stream()]
        return _newest_first(readings, "timestamp")

    # ---------- generated plans ----------
    def add_plan(self, collection: str, data: dict) -> str:
        ref = self.db.collection(collection).document()
        ref.set(dict(data, createdAt=firestore.SERVER_TIMESTAMP))
        logger.info("Saved %s document %s", collection, ref.id)
        return ref.id
