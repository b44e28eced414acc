import itertools
from datetime import datetime

import pytest

from config import TestingConfig
from smart_health import create_app
from smart_health.extensions import Services
from smart_health.models.consent import CONSENT_APPROVED, CONSENT_REVOKED, Consent, consent_id_for
from smart_health.models.user import User
from smart_health.services.ai_service import AIServiceError
from smart_health.services.auth_service import AuthServiceError
from smart_health.services.consent import ConsentChecker
from smart_health.services.storage_service import StorageError

PATIENT = "patient-1"
DOCTOR = "doctor-1"
OTHER_DOCTOR = "doctor-2"
OTHER_PATIENT = "patient-2"

TOKENS = {
    "tok-patient": PATIENT,
    "tok-doctor": DOCTOR,
    "tok-other-doctor": OTHER_DOCTOR,
    "tok-other-patient": OTHER_PATIENT,
}


# =========================
# FAKES
# =========================
class FakeStore:
    """In-memory stand-in for FirestoreStore."""

    def __init__(self):
        self.users = {}
        self.appointments = {}
        self.consents = {}
        self.reports = {}
        self.readings = {}
        self.plans = []
        self._ids = itertools.count(1)

    def _next_id(self, prefix):
        return f"{prefix}-{next(self._ids)}"

    # users
    def get_user(self, uid):
        return self.users.get(uid)

    def get_user_role(self, uid):
        user = self.users.get(uid)
        return user.role if user else None

    def create_user(self, user):
        self.users[user.id] = user
        return user

    def merge_user(self, uid, fields):
        user = self.users.setdefault(uid, User(id=uid))
        merged = User.from_doc(uid, dict(user.to_dict(), **fields))
        self.users[uid] = merged

    # appointments
    def create_appointment(self, appointment):
        appointment.id = self._next_id("appt")
        self.appointments[appointment.id] = appointment
        return appointment

    def get_appointment(self, appointment_id):
        return self.appointments.get(appointment_id)

    def update_appointment(self, appointment_id, fields):
        appointment = self.appointments[appointment_id]
        updated = type(appointment).from_doc(appointment_id, dict(appointment.to_dict(), **fields))
        self.appointments[appointment_id] = updated

    def list_appointments(self, *, patient_id=None, doctor_id=None):
        return [
            a for a in self.appointments.values()
            if (patient_id is None or a.patient_id == patient_id)
            and (doctor_id is None or a.doctor_id == doctor_id)
        ]

    # consents
    def find_consents(self, patient_id, doctor_id, status=CONSENT_APPROVED):
        return [
            c for c in self.consents.values()
            if c.patient_id == patient_id and c.doctor_id == doctor_id and c.status == status
        ]

    def approve_consent(self, appointment):
        consent = Consent(
            id=consent_id_for(appointment.patient_id, appointment.doctor_id, appointment.id),
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            appointment_id=appointment.id,
            status=CONSENT_APPROVED,
            granted_at=datetime.now(),
        )
        self.consents[consent.id] = consent
        appointment.consent_granted = True
        return consent

    def revoke_consent(self, appointment):
        consent_id = consent_id_for(appointment.patient_id, appointment.doctor_id, appointment.id)
        consent = self.consents.get(consent_id) or Consent(
            id=consent_id,
            patient_id=appointment.patient_id,
            doctor_id=appointment.doctor_id,
            appointment_id=appointment.id,
        )
        consent.status = CONSENT_REVOKED
        consent.revoked_at = datetime.now()
        self.consents[consent_id] = consent
        appointment.consent_granted = False

    # reports
    def add_report(self, report):
        report.id = self._next_id("report")
        report.uploaded_at = report.uploaded_at or datetime.now()
        self.reports[report.id] = report
        return report

    def get_report(self, report_id):
        return self.reports.get(report_id)

    def list_reports(self, patient_id):
        found = [r for r in self.reports.values() if r.patient_id == patient_id]
        return sorted(found, key=lambda r: r.uploaded_at, reverse=True)

    def update_report(self, report_id, fields):
        report = self.reports[report_id]
        self.reports[report_id] = type(report).from_doc(report_id, dict(report.to_dict(), **fields))

    def delete_report(self, report_id):
        del self.reports[report_id]

    # readings
    def add_health_reading(self, uid, reading):
        reading.id = self._next_id("reading")
        reading.timestamp = datetime.now()
        self.readings.setdefault(uid, []).append(reading)
        return reading

    def list_health_readings(self, uid, reading_type=None):
        readings = [r for r in self.readings.get(uid, []) if reading_type is None or r.type == reading_type]
        return list(reversed(readings))

    # plans
    def add_plan(self, collection, data):
        plan_id = self._next_id("plan")
        self.plans.append((collection, plan_id, data))
        return plan_id


class FakeAuth:
    def __init__(self):
        self.created = {}
        self.revoked = []
        self.deleted = []

    def verify_id_token(self, token):
        uid = TOKENS.get(token)
        if uid is None or uid in self.revoked:
            raise AuthServiceError("Invalid or expired token")
        return {"uid": uid, "email": f"{uid}@example.com"}

    def create_user(self, email, password, display_name=None):
        if email in self.created.values():
            raise AuthServiceError("Email is already registered", 400)
        uid = f"uid-{len(self.created) + 1}"
        self.created[uid] = email
        return uid

    def delete_user(self, uid):
        self.deleted.append(uid)

    def revoke_tokens(self, uid):
        self.revoked.append(uid)

    def sign_in_with_password(self, email, password):
        for uid, known in self.created.items():
            if known == email and password == "secret123":
                return {"uid": uid, "idToken": "id-token", "refreshToken": "refresh", "expiresIn": "3600"}
        raise AuthServiceError("Invalid email or password")


class FakeStorage:
    configured = True

    def __init__(self):
        self.objects = {}
        self.fail = False

    def upload(self, path, data, content_type):
        if self.fail:
            raise StorageError("File upload failed")
        self.objects[path] = (data, content_type)
        return path

    def signed_url(self, path, expires_in):
        if self.fail:
            raise StorageError("Failed to generate signed URL")
        return f"https://storage.test/sign/{path}?expires={expires_in}"

    def remove(self, path):
        self.objects.pop(path, None)


class FakeAI:
    """Returns ``text`` for every prompt, or raises when ``text`` is None."""

    def __init__(self, text=None):
        self.text = text
        self.calls = []

    @property
    def configured(self):
        return self.text is not None

    def generate(self, prompt, **kwargs):
        self.calls.append((prompt, kwargs))
        if self.text is None:
            raise AIServiceError("not configured")
        return self.text


# =========================
# FIXTURES
# =========================
@pytest.fixture
def store():
    s = FakeStore()
    s.users[PATIENT] = User(id=PATIENT, email="patient-1@example.com", role="patient")
    s.users[OTHER_PATIENT] = User(id=OTHER_PATIENT, email="patient-2@example.com", role="patient")
    s.users[DOCTOR] = User(id=DOCTOR, email="doctor-1@example.com", role="doctor")
    s.users[OTHER_DOCTOR] = User(id=OTHER_DOCTOR, email="doctor-2@example.com", role="doctor")
    return s


@pytest.fixture
def services(store):
    return Services(
        store=store,
        auth=FakeAuth(),
        storage=FakeStorage(),
        gemini=FakeAI(),
        openai=FakeAI(),
        consent=ConsentChecker(store),
    )


@pytest.fixture
def app(services):
    app = create_app(TestingConfig, services=services)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}
