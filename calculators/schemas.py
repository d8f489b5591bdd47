"""Input schemas for each calculator kind."""

from __future__ import annotations

from utils.request_validation import Field, validate_fields

from .formulas import ACTIVITY_MULTIPLIERS


GENDER_CHOICES = ("male", "female")
ACTIVITY_LEVELS = tuple(ACTIVITY_MULTIPLIERS)

GENDER = Field("gender", choices=GENDER_CHOICES)
AGE = Field("age", minimum=10, maximum=120, integer=True, label="Age")
HEIGHT = Field("height", minimum=50, maximum=300, label="Height (cm)")
WEIGHT = Field("weight", minimum=20, maximum=500, label="Weight (kg)")
WAIST = Field("waist", minimum=30, maximum=300, label="Waist (cm)")
HIP = Field("hip", minimum=30, maximum=300, label="Hip (cm)")
ACTIVITY_LEVEL = Field("activityLevel", choices=ACTIVITY_LEVELS)

CALCULATOR_SCHEMAS: dict[str, tuple[Field, ...]] = {
    "bmi": (GENDER, HEIGHT, WEIGHT),
    "bmr": (GENDER, AGE, HEIGHT, WEIGHT, ACTIVITY_LEVEL),
    "body-fat": (GENDER, AGE, HEIGHT, WEIGHT, WAIST, HIP),
    "waist-hip": (GENDER, WAIST, HIP),
    "blood-pressure": (
        Field("systolic", minimum=50, maximum=250, label="Systolic pressure"),
        Field("diastolic", minimum=30, maximum=200, label="Diastolic pressure"),
    ),
    "target-heart-rate": (
        Field("age", minimum=10, maximum=90, integer=True, label="Age"),
    ),
    "sli": (
        AGE,
        Field("exerciseHeartRate", minimum=60, maximum=220, label="Exercise heart rate"),
        Field("restingHeartRate", minimum=40, maximum=120, label="Resting heart rate"),
        Field("duration", minimum=1, maximum=300, label="Duration (minutes)"),
    ),
    "calorie": (GENDER, AGE, HEIGHT, WEIGHT, ACTIVITY_LEVEL),
}


def validate_calculator_input(kind: str, payload: dict) -> dict:
    """Return the coerced inputs for ``kind`` or raise ``ValidationError``."""

    return validate_fields(CALCULATOR_SCHEMAS[kind], payload)
