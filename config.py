import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Uploads
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB per report
    ALLOWED_REPORT_MIMETYPES = {"application/pdf", "image/jpeg", "image/png", "image/jpg"}

    # Firebase Admin SDK: service account file, or the three env vars below
    FIREBASE_SERVICE_ACCOUNT = os.environ.get("FIREBASE_SERVICE_ACCOUNT")
    FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID")
    FIREBASE_PRIVATE_KEY = os.environ.get("FIREBASE_PRIVATE_KEY")
    FIREBASE_CLIENT_EMAIL = os.environ.get("FIREBASE_CLIENT_EMAIL")
    # Web API key, only needed for /api/auth/login (Identity Toolkit REST)
    FIREBASE_WEB_API_KEY = os.environ.get("FIREBASE_WEB_API_KEY")

    # Supabase Storage (service role key stays on the server)
    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    SUPABASE_BUCKET = os.environ.get("SUPABASE_BUCKET", "medical-reports")
    SIGNED_URL_EXPIRES_IN = int(os.environ.get("SIGNED_URL_EXPIRES_IN", 3600))

    # === Generative AI ===
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-1.5-flash")
    GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
    OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-3.5-turbo")
    OPENAI_API_BASE = "https://api.openai.com/v1"
    AI_TIMEOUT = int(os.environ.get("AI_TIMEOUT", 30))
    # Off in the demo deployment: explanation endpoint answers with a "premium" notice
    AI_EXPLANATIONS_ENABLED = _env_flag("AI_EXPLANATIONS_ENABLED")

    # Doctor access ends with the appointment when enabled (product decision, default off)
    CONSENT_EXPIRES_WITH_APPOINTMENT = _env_flag("CONSENT_EXPIRES_WITH_APPOINTMENT")
    APPOINTMENT_DURATION_MINUTES = int(os.environ.get("APPOINTMENT_DURATION_MINUTES", 0))

    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    DEPLOYMENT = os.environ.get("VERCEL_URL", "local")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    GEMINI_API_KEY = None
    OPENAI_API_KEY = None
    FIREBASE_WEB_API_KEY = None
    CONSENT_EXPIRES_WITH_APPOINTMENT = False
    APPOINTMENT_DURATION_MINUTES = 0
