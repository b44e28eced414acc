from dataclasses import dataclass
from datetime import datetime

from smart_health.models.base import FirestoreModel

READING_TYPES = {"bp", "sugar"}


@dataclass
class HealthReading(FirestoreModel):
    # users/{uid}/health-readings/{id}
    type: str | None = None

    # 'bp'
    systolic: int | None = None
    diastolic: int | None = None

    # 'sugar' (mg/dL), sugarType e.g. fasting / post-meal / random
    value: float | None = None
    sugar_type: str | None = None

    timestamp: datetime | None = None
