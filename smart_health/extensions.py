from dataclasses import dataclass
from typing import Any

from flask import current_app
from flask_cors import CORS

from smart_health.services.consent import ConsentChecker

cors = CORS()

EXTENSION_KEY = "smart_health"


@dataclass
class Services:
    """Clients every handler works with, built once per app.

    Registered under ``app.extensions["smart_health"]``; tests hand in fakes.
    """

    store: Any
    auth: Any
    storage: Any
    gemini: Any
    openai: Any
    consent: ConsentChecker


def build_services(config) -> Services:
    from smart_health.extensions_firebase import init_firebase
    from smart_health.services.ai_service import GeminiClient, OpenAIClient
    from smart_health.services.auth_service import FirebaseAuthService
    from smart_health.services.firestore_store import FirestoreStore
    from smart_health.services.storage_service import ReportStorage

    store = FirestoreStore(init_firebase(config))
    return Services(
        store=store,
        auth=FirebaseAuthService(web_api_key=config.get("FIREBASE_WEB_API_KEY")),
        storage=ReportStorage(
            config.get("SUPABASE_URL"),
            config.get("SUPABASE_SERVICE_ROLE_KEY"),
            config.get("SUPABASE_BUCKET", "medical-reports"),
        ),
        gemini=GeminiClient(
            config.get("GEMINI_API_KEY"),
            model=config.get("GEMINI_MODEL", "gemini-1.5-flash"),
            api_base=config.get("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"),
            timeout=config.get("AI_TIMEOUT", 30),
        ),
        openai=OpenAIClient(
            config.get("OPENAI_API_KEY"),
            model=config.get("OPENAI_MODEL", "gpt-3.5-turbo"),
            api_base=config.get("OPENAI_API_BASE", "https://api.openai.com/v1"),
            timeout=config.get("AI_TIMEOUT", 30),
        ),
        consent=consent_checker_for(store, config),
    )


def consent_checker_for(store, config) -> ConsentChecker:
    return ConsentChecker(
        store,
        expires_with_appointment=config.get("CONSENT_EXPIRES_WITH_APPOINTMENT", False),
        appointment_duration_minutes=config.get("APPOINTMENT_DURATION_MINUTES", 0),
    )


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
