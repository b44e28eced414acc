import logging
from datetime import datetime

from flask import Blueprint, request

from smart_health.extensions import get_services
from smart_health.models.appointment import DOCTOR_DECISIONS, Appointment
from smart_health.models.user import ROLE_DOCTOR, ROLE_PATIENT
from smart_health.utils.request_data import InvalidField, json_body, text_field
from smart_health.utils.response import success, error
from smart_health.web.firebase_guard import firebase_token_required

logger = logging.getLogger(__name__)

appointment_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


# =========================
# HELPERS
# =========================
def _valid_date(value: str) -> bool:
    try:
        datetime.strptime(value, "%Y-%m-%d")
        return True
    except (TypeError, ValueError):
        return False


def _valid_time(value: str) -> bool:
    try:
        datetime.strptime(value, "%H:%M")
        return True
    except (TypeError, ValueError):
        return False


def _own_appointment(appointment_id, field):
    """Load an appointment the current user sits on ``field`` of ('patient_id' or 'doctor_id')."""
    appointment = get_services().store.get_appointment(appointment_id)
    if not appointment:
        return None, error("Appointment not found", 404)
    if getattr(appointment, field) != request.current_uid:
        return None, error("Access denied", 403)
    return appointment, None


# =========================
# PATIENT: REQUEST / LIST
# =========================
@appointment_bp.route("", methods=["POST"])
@firebase_token_required(roles=[ROLE_PATIENT])
def request_appointment():
    data = json_body()
    try:
        doctor_id = text_field(data, "doctorId")
        date = text_field(data, "date")
        time = text_field(data, "time")
        reason = text_field(data, "reason") or None
    except InvalidField as exc:
        return error(str(exc), 400)

    if not doctor_id or not date or not time:
        return error("doctorId, date and time are required", 400)
    if not _valid_date(date):
        return error("date must be YYYY-MM-DD", 400)
    if not _valid_time(time):
        return error("time must be HH:MM", 400)

    services = get_services()
    if services.store.get_user_role(doctor_id) != ROLE_DOCTOR:
        return error("Doctor not found", 404)

    appointment = services.store.create_appointment(Appointment(
        patient_id=request.current_uid,
        doctor_id=doctor_id,
        date=date,
        time=time,
        reason=reason,
    ))
    logger.info("Appointment %s requested by %s with %s", appointment.id, request.current_uid, doctor_id)
    return success(appointment.to_json(), "Appointment requested", 201)


@appointment_bp.route("", methods=["GET"])
@firebase_token_required()
def list_appointments():
    services = get_services()
    uid = request.current_uid

    if services.store.get_user_role(uid) == ROLE_DOCTOR:
        appointments = services.store.list_appointments(doctor_id=uid)
        day = request.args.get("date")
        if day:
            appointments = [a for a in appointments if a.date == day]
        appointments.sort(key=lambda a: (a.date or "", a.time or ""))
    else:
        appointments = services.store.list_appointments(patient_id=uid)
        appointments.sort(key=lambda a: (a.date or "", a.time or ""), reverse=True)

    return success([a.to_json() for a in appointments])


# =========================
# DOCTOR: STATUS / NOTES
# =========================
@appointment_bp.route("/<appointment_id>/status", methods=["PATCH"])
@firebase_token_required(roles=[ROLE_DOCTOR])
def update_status(appointment_id):
    try:
        status = text_field(json_body(), "status", lower=True)
    except InvalidField as exc:
        return error(str(exc), 400)
    if status not in DOCTOR_DECISIONS:
        return error("status must be 'accepted' or 'rejected'", 400)

    appointment, err = _own_appointment(appointment_id, "doctor_id")
    if err:
        return err

    get_services().store.update_appointment(appointment_id, {"status": status})
    appointment.status = status
    return success(appointment.to_json(), f"Appointment {status}")


@appointment_bp.route("/<appointment_id>/notes", methods=["PUT"])
@firebase_token_required(roles=[ROLE_DOCTOR])
def update_notes(appointment_id):
    notes = json_body().get("notes")
    if not isinstance(notes, str):
        return error("notes must be a string", 400)

    appointment, err = _own_appointment(appointment_id, "doctor_id")
    if err:
        return err

    get_services().store.update_appointment(appointment_id, {"doctorNotes": notes.strip()})
    appointment.doctor_notes = notes.strip()
    return success(appointment.to_json(), "Notes saved")


# =========================
# PATIENT: CONSENT
# =========================
@appointment_bp.route("/<appointment_id>/consent", methods=["POST"])
@firebase_token_required(roles=[ROLE_PATIENT])
def grant_consent(appointment_id):
    appointment, err = _own_appointment(appointment_id, "patient_id")
    if err:
        return err

    consent = get_services().store.approve_consent(appointment)
    logger.info("Consent %s granted by patient %s", consent.id, appointment.patient_id)
    return success({"appointmentId": appointment_id, "consentId": consent.id, "consentGranted": True},
                   "Consent granted")


@appointment_bp.route("/<appointment_id>/consent", methods=["DELETE"])
@firebase_token_required(roles=[ROLE_PATIENT])
def revoke_consent(appointment_id):
    appointment, err = _own_appointment(appointment_id, "patient_id")
    if err:
        return err

    get_services().store.revoke_consent(appointment)
    logger.info("Consent for appointment %s revoked by patient %s", appointment_id, appointment.patient_id)
    return success({"appointmentId": appointment_id, "consentGranted": False}, "Consent revoked")


# =========================
# DOCTOR: PATIENT DETAILS
# =========================
@appointment_bp.route("/<appointment_id>/patient", methods=["GET"])
@firebase_token_required(roles=[ROLE_DOCTOR])
def patient_details(appointment_id):
    appointment, err = _own_appointment(appointment_id, "doctor_id")
    if err:
        return err

    services = get_services()
    patient_id = appointment.patient_id
    if not services.consent.check(request.current_uid, patient_id, resource="patient-data"):
        return error("Access denied. Patient consent required.", 403)

    patient = services.store.get_user(patient_id)
    if not patient:
        return error("Patient not found", 404)

    return success({
        "appointment": appointment.to_json(),
        "patient": patient.to_json(),
        "reports": [r.to_json() for r in services.store.list_reports(patient_id)],
        "readings": [r.to_json() for r in services.store.list_health_readings(patient_id)],
    })
