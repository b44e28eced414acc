import logging

import requests
from firebase_admin import auth as fb_auth
from firebase_admin import exceptions as fb_exceptions

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"


class AuthServiceError(Exception):
    def __init__(self, message, status_code=401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class FirebaseAuthService:
    """Firebase Authentication: ID tokens, user creation, password sign-in."""

    def __init__(self, web_api_key: str | None = None, timeout: int = 15):
        self.web_api_key = web_api_key
        self.timeout = timeout

    def verify_id_token(self, id_token: str) -> dict:
        try:
            return fb_auth.verify_id_token(id_token, check_revoked=True)
        except fb_auth.RevokedIdTokenError as exc:
            raise AuthServiceError("Token has been revoked") from exc
        except fb_auth.UserDisabledError as exc:
            raise AuthServiceError("User account is disabled", 403) from exc
        except (ValueError, fb_auth.InvalidIdTokenError) as exc:
            raise AuthServiceError("Invalid or expired token") from exc
        except fb_exceptions.FirebaseError as exc:
            # Certificate fetch or revocation lookup could not reach Firebase
            logger.error("Firebase token verification unavailable: %s", exc)
            raise AuthServiceError("Authentication service unavailable", 503) from exc

    def create_user(self, email: str, password: str, display_name: str | None = None) -> str:
        try:
            record = fb_auth.create_user(email=email, password=password, display_name=display_name)
        except fb_auth.EmailAlreadyExistsError as exc:
            raise AuthServiceError("Email is already registered", 400) from exc
        except ValueError as exc:
            raise AuthServiceError(str(exc), 400) from exc
        except fb_exceptions.FirebaseError as exc:
            logger.error("Firebase create_user failed: %s", exc)
            raise AuthServiceError("Could not create user", 500) from exc
        return record.uid

    def delete_user(self, uid: str) -> None:
        fb_auth.delete_user(uid)

    def revoke_tokens(self, uid: str) -> None:
        fb_auth.revoke_refresh_tokens(uid)

    def sign_in_with_password(self, email: str, password: str) -> dict:
        if not self.web_api_key:
            raise AuthServiceError("FIREBASE_WEB_API_KEY is not configured", 503)
        try:
            r = requests.post(
                IDENTITY_TOOLKIT_URL,
                params={"key": self.web_api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise AuthServiceError("Authentication service unavailable", 503) from exc

        try:
            result = r.json()
        except ValueError as exc:
            raise AuthServiceError("Authentication service unavailable", 503) from exc
        if not isinstance(result, dict):
            raise AuthServiceError("Authentication service unavailable", 503)
        if "error" in result:
            raise AuthServiceError("Invalid email or password", 401)
        return {
            "uid": result.get("localId"),
            "idToken": result.get("idToken"),
            "refreshToken": result.get("refreshToken"),
            "expiresIn": int(result.get("expiresIn", 3600)),
        }
