import logging
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from conftest import DOCTOR, OTHER_DOCTOR, PATIENT, FakeStore
from smart_health.models.appointment import Appointment
from smart_health.models.consent import CONSENT_APPROVED, CONSENT_REVOKED, Consent
from smart_health.models.user import User
from smart_health.services.consent import (
    REASON_CONSENT,
    REASON_EXPIRED,
    REASON_MISSING_IDENTITY,
    REASON_NO_CONSENT,
    REASON_NOT_DOCTOR,
    REASON_OWNER,
    ConsentChecker,
    evaluate_access,
)

APPOINTMENT = Appointment(id="appt-1", patient_id=PATIENT, doctor_id=DOCTOR, date="2026-03-10", time="09:30")


def _approved(doctor=DOCTOR, appointment_id="appt-1", status=CONSENT_APPROVED):
    return Consent(id="c", patient_id=PATIENT, doctor_id=doctor, appointment_id=appointment_id, status=status)


# =========================
# PREDICATE
# =========================
@pytest.mark.parametrize("role", [None, "patient", "doctor"])
@pytest.mark.parametrize("consents", [[], [_approved()], [_approved(status=CONSENT_REVOKED)]])
def test_owner_always_allowed(role, consents):
    decision = evaluate_access(PATIENT, PATIENT, role, consents)
    assert decision.allowed
    assert decision.reason == REASON_OWNER


def test_owner_allowed_even_after_appointment_ended():
    decision = evaluate_access(
        PATIENT, PATIENT, "patient", [],
        appointments={"appt-1": APPOINTMENT},
        now=datetime(2030, 1, 1),
        expires_with_appointment=True,
    )
    assert decision


def test_doctor_without_consent_denied():
    decision = evaluate_access(DOCTOR, PATIENT, "doctor", [])
    assert not decision
    assert decision.reason == REASON_NO_CONSENT


def test_revoked_consent_does_not_count():
    assert not evaluate_access(DOCTOR, PATIENT, "doctor", [_approved(status=CONSENT_REVOKED)])


def test_consent_for_another_doctor_does_not_count():
    assert not evaluate_access(OTHER_DOCTOR, PATIENT, "doctor", [_approved(doctor=DOCTOR)])


@pytest.mark.parametrize("role", [None, "", "patient", "admin", "Doctor"])
def test_non_doctor_with_consent_denied(role):
    decision = evaluate_access(DOCTOR, PATIENT, role, [_approved()])
    assert not decision
    assert decision.reason == REASON_NOT_DOCTOR


def test_doctor_with_consent_allowed():
    decision = evaluate_access(DOCTOR, PATIENT, "doctor", [_approved()])
    assert decision.allowed
    assert decision.reason == REASON_CONSENT


@pytest.mark.parametrize("requester, patient", [(None, PATIENT), (DOCTOR, None), ("", "")])
def test_missing_identity_denied(requester, patient):
    decision = evaluate_access(requester, patient, "doctor", [_approved()])
    assert not decision
    assert decision.reason == REASON_MISSING_IDENTITY


def test_decision_is_idempotent_without_expiry():
    args = (DOCTOR, PATIENT, "doctor", [_approved()])
    assert {evaluate_access(*args) for _ in range(5)} == {evaluate_access(*args)}


# =========================
# APPOINTMENT EXPIRY
# =========================
def _with_expiry(now, duration=timedelta(0), appointments=None):
    return evaluate_access(
        DOCTOR, PATIENT, "doctor", [_approved()],
        appointments={"appt-1": APPOINTMENT} if appointments is None else appointments,
        now=now,
        expires_with_appointment=True,
        appointment_duration=duration,
    )


def test_expiry_allows_until_appointment_start():
    assert _with_expiry(datetime(2026, 3, 10, 9, 0))
    assert _with_expiry(datetime(2026, 3, 10, 9, 30))


def test_expiry_denies_right_after_end_without_grace():
    decision = _with_expiry(datetime(2026, 3, 10, 9, 30, 1))
    assert not decision
    assert decision.reason == REASON_EXPIRED


def test_expiry_respects_appointment_duration():
    duration = timedelta(minutes=30)
    assert _with_expiry(datetime(2026, 3, 10, 10, 0), duration)
    assert not _with_expiry(datetime(2026, 3, 10, 10, 0, 1), duration)


def test_expiry_denies_consent_without_known_appointment():
    assert not _with_expiry(datetime(2026, 3, 1), appointments={})


def test_expiry_ignores_appointment_of_another_doctor():
    foreign = Appointment(id="appt-1", patient_id=PATIENT, doctor_id=OTHER_DOCTOR, date="2026-03-10", time="09:30")
    assert not _with_expiry(datetime(2026, 3, 1), appointments={"appt-1": foreign})


def test_expiry_requires_current_time():
    with pytest.raises(ValueError):
        evaluate_access(DOCTOR, PATIENT, "doctor", [_approved()], expires_with_appointment=True)


# =========================
# CHECKER
# =========================
@pytest.fixture
def checker_store():
    store = FakeStore()
    store.users[DOCTOR] = User(id=DOCTOR, role="doctor")
    store.users[PATIENT] = User(id=PATIENT, role="patient")
    store.appointments["appt-1"] = replace(APPOINTMENT)
    return store


def test_checker_logs_grant_and_deny(checker_store, caplog):
    checker = ConsentChecker(checker_store)

    with caplog.at_level(logging.INFO, logger="smart_health.audit"):
        assert not checker.check(DOCTOR, PATIENT, resource="reports")
        checker_store.approve_consent(checker_store.appointments["appt-1"])
        assert checker.check(DOCTOR, PATIENT, resource="reports")

    audit = [r for r in caplog.records if r.name == "smart_health.audit"]
    assert [r.levelname for r in audit] == ["WARNING", "INFO"]
    assert audit[0].getMessage().startswith("DENY reports")
    assert audit[1].getMessage().startswith("GRANT reports")


def test_checker_unknown_requester_is_never_a_doctor(checker_store):
    checker_store.approve_consent(checker_store.appointments["appt-1"])
    checker = ConsentChecker(checker_store)
    assert not checker.check("ghost", PATIENT)


def test_checker_expiry_uses_clock(checker_store):
    checker_store.approve_consent(checker_store.appointments["appt-1"])
    now = {"value": datetime(2026, 3, 10, 8, 0)}
    checker = ConsentChecker(
        checker_store,
        expires_with_appointment=True,
        appointment_duration_minutes=15,
        clock=lambda: now["value"],
    )

    assert checker.check(DOCTOR, PATIENT)
    now["value"] = datetime(2026, 3, 10, 9, 45)
    assert checker.check(DOCTOR, PATIENT)
    now["value"] = datetime(2026, 3, 10, 9, 46)
    assert not checker.check(DOCTOR, PATIENT)
