from dataclasses import dataclass
from datetime import datetime

from smart_health.models.base import FirestoreModel

ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"
ROLES = {ROLE_PATIENT, ROLE_DOCTOR}

# Fields a user may change through the health profile form
PROFILE_FIELDS = (
    "username", "age", "gender", "height", "weight",
    "activityLevel", "bloodPressure", "bloodSugar",
)


@dataclass
class User(FirestoreModel):
    # users/{uid}; the document id is the Firebase Auth uid
    username: str | None = None
    email: str | None = None
    age: int | None = None
    gender: str | None = None
    role: str = ROLE_PATIENT

    # Health profile
    height: float | None = None
    weight: float | None = None
    bmi: float | None = None
    bmi_status: str | None = None
    activity_level: str | None = None
    blood_pressure: str | None = None
    blood_sugar: float | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
