import logging
import time
from datetime import datetime, timedelta, timezone

from flask import Blueprint, current_app, jsonify, request
from werkzeug.utils import secure_filename

from smart_health.extensions import get_services
from smart_health.models.report import MedicalReport
from smart_health.services.ai_service import AIServiceError
from smart_health.services.report_analysis import analyze_report
from smart_health.services.storage_service import StorageError
from smart_health.utils.response import success, error
from smart_health.web.firebase_guard import firebase_token_required

logger = logging.getLogger(__name__)

report_bp = Blueprint("reports", __name__, url_prefix="/api/reports")

PREMIUM_MESSAGE = "Report explanation is available in premium version."


# =========================
# HELPERS
# =========================
def _object_key(patient_id: str, appointment_id: str | None, filename: str) -> str:
    safe_name = secure_filename(filename) or "report"
    return f"{patient_id}/{appointment_id or 'general'}/{int(time.time() * 1000)}_{safe_name}"


def _load_report(report_id):
    """Returns (report, None) or (None, error response)."""
    report = get_services().store.get_report(report_id)
    if not report:
        return None, error("Report not found", 404)
    return report, None


def _denied():
    return error("Access denied. Patient consent required.", 403)


def _explanation_prompt(report: MedicalReport) -> str:
    analysis = report.ai_analysis or {}
    return (
        f'Explain the medical report "{report.original_name}" to the patient in simple, friendly language.\n'
        f"Summary so far: {analysis.get('summary', 'not available')}\n"
        "Describe what the usual values in this kind of report mean, which results would need attention, "
        "and which questions the patient could ask their doctor. "
        "End with a reminder that this is not a medical diagnosis."
    )


# =========================
# UPLOAD
# =========================
@report_bp.route("/upload", methods=["POST"])
@firebase_token_required()
def upload_report():
    file = request.files.get("report")
    if not file or not file.filename:
        return error("No file uploaded", 400)

    allowed = current_app.config["ALLOWED_REPORT_MIMETYPES"]
    if file.mimetype not in allowed:
        return error("Invalid file type. Only PDF, JPG, and PNG files are allowed.", 400)

    data = file.read()
    if not data:
        return error("Uploaded file is empty", 400)

    services = get_services()
    patient_id = request.current_uid

    appointment_id = (request.form.get("appointmentId") or "").strip() or None
    if appointment_id:
        appointment = services.store.get_appointment(appointment_id)
        if not appointment:
            return error("Appointment not found", 404)
        if appointment.patient_id != patient_id:
            return error("Access denied", 403)

    # Analysis only needs name and type, so it runs before anything is stored
    analysis, raw = analyze_report(services.gemini, file.filename, file.mimetype)

    key = _object_key(patient_id, appointment_id, file.filename)
    try:
        storage_path = services.storage.upload(key, data, file.mimetype)
    except StorageError as exc:
        return error(str(exc), 500)

    report = MedicalReport(
        patient_id=patient_id,
        patient_email=request.current_claims.get("email"),
        appointment_id=appointment_id,
        file_name=key,
        original_name=file.filename,
        file_size=len(data),
        mime_type=file.mimetype,
        storage_path=storage_path,
        status="analyzed" if raw else "uploaded",
        ai_analysis=analysis,
    )
    try:
        services.store.add_report(report)
    except Exception:
        # No medicalReports document means the owner could never delete the object
        logger.exception("Could not save report document for %s, removing uploaded object", key)
        try:
            services.storage.remove(storage_path)
        except StorageError:
            logger.error("Orphaned storage object %s", storage_path)
        return error("Failed to save report", 500)

    logger.info("Stored report %s for patient %s (%d bytes)", report.id, patient_id, len(data))

    return success(report.to_json(), "Report uploaded successfully", 201)


# =========================
# LISTING
# =========================
@report_bp.route("", methods=["GET"])
@firebase_token_required()
def my_reports():
    reports = get_services().store.list_reports(request.current_uid)
    return success([r.to_json() for r in reports])


@report_bp.route("/patient/<patient_id>", methods=["GET"])
@firebase_token_required()
def patient_reports(patient_id):
    services = get_services()
    if not services.consent.check(request.current_uid, patient_id, resource="reports"):
        return _denied()
    reports = services.store.list_reports(patient_id)
    return success([r.to_json() for r in reports])


# =========================
# SINGLE REPORT
# =========================
@report_bp.route("/<report_id>/signed-url", methods=["GET"])
@firebase_token_required()
def signed_url(report_id):
    report, err = _load_report(report_id)
    if err:
        return err

    services = get_services()
    if not services.consent.check(request.current_uid, report.patient_id, resource=f"report:{report_id}"):
        return _denied()

    expires_in = current_app.config.get("SIGNED_URL_EXPIRES_IN", 3600)
    try:
        url = services.storage.signed_url(report.storage_path or report.file_name, expires_in)
    except StorageError as exc:
        return error(str(exc), 500)

    expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
    return success(
        {
            "signedUrl": url,
            "expiresIn": expires_in,
            "expiresAt": expires_at.isoformat(),
            "fileName": report.original_name,
            "mimeType": report.mime_type,
        },
        "Signed URL generated",
    )


@report_bp.route("/<report_id>/generate-explanation", methods=["POST"])
@firebase_token_required()
def generate_explanation(report_id):
    report, err = _load_report(report_id)
    if err:
        return err
    if report.patient_id != request.current_uid:
        return error("Access denied", 403)

    if not current_app.config.get("AI_EXPLANATIONS_ENABLED"):
        return jsonify({"success": False, "message": PREMIUM_MESSAGE}), 200

    services = get_services()
    try:
        explanation = services.gemini.generate(_explanation_prompt(report), temperature=0.5, max_output_tokens=1024)
    except AIServiceError as exc:
        logger.warning("Explanation for report %s failed: %s", report_id, exc)
        explanation = (report.ai_analysis or {}).get("explanation") or (
            "AI explanation is temporarily unavailable. Please review the report with your doctor."
        )

    services.store.update_report(report_id, {"aiExplanation": explanation})
    return success({"reportId": report_id, "explanation": explanation}, "Explanation generated")


@report_bp.route("/<report_id>", methods=["DELETE"])
@firebase_token_required()
def delete_report(report_id):
    report, err = _load_report(report_id)
    if err:
        return err
    if report.patient_id != request.current_uid:
        return error("Access denied", 403)

    services = get_services()
    try:
        services.storage.remove(report.storage_path or report.file_name)
    except StorageError as exc:
        return error(str(exc), 500)

    services.store.delete_report(report_id)
    logger.info("Deleted report %s of patient %s", report_id, report.patient_id)
    return success({"id": report_id}, "Report deleted")
