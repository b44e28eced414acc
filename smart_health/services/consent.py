"""Doctor/patient data access.

``evaluate_access`` is the single rule deciding whether a requester may read
a patient's reports and health data. It is pure: all state (role, consent
records, appointments, current time) is passed in. ``ConsentChecker`` loads
that state from the store, asks the rule and writes the audit log line.

Rule:
  * the patient always reads their own data;
  * anyone else must have role 'doctor' AND an 'approved' consent record
    naming them as doctor for this patient;
  * with appointment expiry switched on, such a consent only counts until
    its appointment ends (date + time + duration, no grace period);
  * everything else is denied.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from smart_health.models.consent import CONSENT_APPROVED
from smart_health.models.user import ROLE_DOCTOR

audit_logger = logging.getLogger("smart_health.audit")

REASON_OWNER = "owner"
REASON_CONSENT = "approved consent"
REASON_MISSING_IDENTITY = "missing requester or patient id"
REASON_NOT_DOCTOR = "requester is not a doctor"
REASON_NO_CONSENT = "no approved consent"
REASON_EXPIRED = "appointment has ended"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str

    def __bool__(self):
        return self.allowed


def evaluate_access(requester_uid, patient_id, requester_role, consents,
                    appointments=None, now: datetime | None = None,
                    expires_with_appointment: bool = False,
                    appointment_duration: timedelta = timedelta(0)) -> AccessDecision:
    if not requester_uid or not patient_id:
        return AccessDecision(False, REASON_MISSING_IDENTITY)

    if requester_uid == patient_id:
        return AccessDecision(True, REASON_OWNER)

    if requester_role != ROLE_DOCTOR:
        return AccessDecision(False, REASON_NOT_DOCTOR)

    approved = [
        c for c in consents or []
        if c.patient_id == patient_id and c.doctor_id == requester_uid and c.status == CONSENT_APPROVED
    ]
    if not approved:
        return AccessDecision(False, REASON_NO_CONSENT)

    if not expires_with_appointment:
        return AccessDecision(True, REASON_CONSENT)

    if now is None:
        raise ValueError("now is required when consent expires with the appointment")

    appointments = appointments or {}
    for consent in approved:
        appointment = appointments.get(consent.appointment_id)
        if appointment is None:
            continue
        if appointment.patient_id != patient_id or appointment.doctor_id != requester_uid:
            continue
        end = appointment.ends_at(appointment_duration)
        if end is not None and now <= end:
            return AccessDecision(True, REASON_CONSENT)
    return AccessDecision(False, REASON_EXPIRED)


class ConsentChecker:
    def __init__(self, store, expires_with_appointment: bool = False,
                 appointment_duration_minutes: int = 0, clock=datetime.now):
        self.store = store
        self.expires_with_appointment = expires_with_appointment
        self.appointment_duration = timedelta(minutes=appointment_duration_minutes)
        self.clock = clock

    def check(self, requester_uid: str, patient_id: str, resource: str = "patient-data") -> AccessDecision:
        role = None
        consents = []
        appointments = {}

        if requester_uid and patient_id and requester_uid != patient_id:
            role = self.store.get_user_role(requester_uid)
            if role == ROLE_DOCTOR:
                consents = self.store.find_consents(patient_id, requester_uid)
                if self.expires_with_appointment:
                    for consent in consents:
                        if consent.appointment_id and consent.appointment_id not in appointments:
                            appointment = self.store.get_appointment(consent.appointment_id)
                            if appointment is not None:
                                appointments[consent.appointment_id] = appointment

        decision = evaluate_access(
            requester_uid,
            patient_id,
            role,
            consents,
            appointments=appointments,
            now=self.clock() if self.expires_with_appointment else None,
            expires_with_appointment=self.expires_with_appointment,
            appointment_duration=self.appointment_duration,
        )

        if decision.allowed:
            audit_logger.info("GRANT %s requester=%s patient=%s reason=%s",
                              resource, requester_uid, patient_id, decision.reason)
        else:
            audit_logger.warning("DENY %s requester=%s patient=%s reason=%s",
                                 resource, requester_uid, patient_id, decision.reason)
        return decision
