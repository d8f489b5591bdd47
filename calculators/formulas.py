"""Closed-form health metric formulas and their advice tables.

Every function here is pure: validated numbers in, a result dictionary and an
advice string (or ``None``) out. Band tables are ``(upper_bound, text)`` pairs
scanned in order; the first bound the value falls below wins, so a value equal
to a bound resolves to the next, higher band.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence


ACTIVITY_MULTIPLIERS = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "veryActive": 1.9,
}

BMI_ADVICE = (
    (18.5, "Underweight. Consider increasing nutrient intake and adding strength training."),
    (24.0, "Healthy weight. Keep up your current lifestyle."),
    (27.0, "Slightly overweight. Increase daily activity and watch your diet."),
    (30.0, "Approaching obesity. Start a structured exercise and diet plan soon."),
    (math.inf, "Obese. Consult a doctor and set up a weight-loss plan."),
)

# Body fat bands are inclusive on the upper bound except the lowest one.
BODY_FAT_ADVICE = {
    "male": (
        (6.0, False, "Body fat is low. Add quality carbohydrates and strength training."),
        (24.0, True, "Body fat is in the healthy range. Keep up your current habits."),
        (30.0, True, "Body fat is slightly high. Add aerobic exercise and manage your diet."),
        (math.inf, True, "Body fat is high. Consider a fat-loss plan with a professional."),
    ),
    "female": (
        (16.0, False, "Body fat is low. Eat a balanced diet and avoid an energy deficit."),
        (30.0, True, "Body fat is in the healthy range. Keep up your current habits."),
        (36.0, True, "Body fat is slightly high. Prioritise sleep and aerobic training."),
        (math.inf, True, "Body fat is high. Consider a fat-loss plan with a professional."),
    ),
}

WAIST_HIP_ADVICE = {
    "male": (
        (0.9, "Healthy shape. Keep exercising regularly and eating a balanced diet."),
        (1.0, "Mild central obesity risk. Cut refined sugar and late-night snacks."),
        (math.inf, "High central obesity risk. See a doctor about weight management."),
    ),
    "female": (
        (0.8, "Healthy shape. Keep exercising regularly and eating a balanced diet."),
        (0.85, "Mild central obesity risk. Add core strength training."),
        (math.inf, "High central obesity risk. See a doctor about weight management."),
    ),
}

BLOOD_PRESSURE_ADVICE = {
    "low": "Blood pressure is low. See a doctor if you feel dizzy or fatigued.",
    "normal": "Blood pressure is normal. Keep up your healthy lifestyle.",
    "elevated": "Blood pressure is elevated. Keep a healthy diet and exercise regularly.",
    "pre-hypertension": "Pre-hypertension. Reduce salt intake and monitor your blood pressure.",
    "stage-1": "Stage 1 hypertension. See a doctor soon and follow their advice.",
    "stage-2": "Stage 2 or higher hypertension. Seek professional medical help immediately.",
}

SLI_ADVICE = (
    (10.0, "Low training load. Extend the duration or raise the intensity."),
    (25.0, "Moderate load. Regular sessions like this support cardiovascular health."),
    (40.0, "High load. Warm up and stretch well, and watch for any discomfort."),
    (math.inf, "Very high load. Train at this intensity under a coach or doctor."),
)

HEART_RATE_ZONES = {
    "warmUpRange": (0.5, 0.6),
    "fatBurnRange": (0.6, 0.7),
    "cardioRange": (0.7, 0.85),
}


def _band(value: float, table: Sequence[tuple[float, str]]) -> str:
    for upper, text in table:
        if value < upper:
            return text
    return table[-1][1]


def round_half_up(value: float, places: int = 0) -> float | int:
    """Round the exact binary value of ``value`` with ties away from zero.

    Returns an int when ``places`` is 0, otherwise a float.
    """

    quantized = Decimal(value).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return int(quantized) if places == 0 else float(quantized)


def calculate_bmi(height: float, weight: float) -> tuple[dict, str]:
    """Body mass index from height in centimetres and weight in kilograms."""

    bmi = round_half_up(weight / (height / 100) ** 2, 2)
    return {"bmi": bmi}, _band(bmi, BMI_ADVICE)


def basal_metabolic_rate(gender: str, age: float, height: float, weight: float) -> float:
    """Unrounded Mifflin-St Jeor basal metabolic rate in kcal/day."""

    base = 10 * weight + 6.25 * height - 5 * age
    return base + 5 if gender == "male" else base - 161


def calculate_bmr(
    gender: str, age: float, height: float, weight: float, activity_level: str
) -> tuple[dict, str]:
    bmr = basal_metabolic_rate(gender, age, height, weight)
    calorie_needs = round_half_up(bmr * ACTIVITY_MULTIPLIERS[activity_level])
    advice = (
        f"Based on your activity level, aim for about {calorie_needs} kcal per day "
        "to maintain your current weight."
    )
    return {"bmr": round_half_up(bmr), "calorieNeeds": calorie_needs}, advice


def body_fat_advice(gender: str, percentage: float) -> str:
    for upper, inclusive, text in BODY_FAT_ADVICE[gender]:
        if percentage < upper or (inclusive and percentage == upper):
            return text
    return BODY_FAT_ADVICE[gender][-1][2]


def calculate_body_fat(gender: str, height: float, waist: float, hip: float) -> tuple[dict, str]:
    """US Navy body fat estimate as a percentage, never below zero."""

    if gender == "male":
        raw = 86.010 * math.log10(waist) - 70.041 * math.log10(height) + 36.76
    else:
        raw = 163.205 * math.log10(waist + hip) - 97.684 * math.log10(height) - 78.387
    percentage = max(0.0, round_half_up(raw, 2))
    return {"bodyFatPercentage": percentage}, body_fat_advice(gender, percentage)


def calculate_waist_hip_ratio(gender: str, waist: float, hip: float) -> tuple[dict, str]:
    ratio = round_half_up(waist / hip, 2)
    return {"ratio": ratio}, _band(ratio, WAIST_HIP_ADVICE[gender])


def blood_pressure_category(systolic: float, diastolic: float) -> str:
    """Return the most severe band that either reading reaches."""

    if systolic >= 160 or diastolic >= 100:
        return "stage-2"
    if systolic >= 140 or diastolic >= 90:
        return "stage-1"
    if systolic >= 130 or diastolic >= 80:
        return "pre-hypertension"
    if systolic >= 120:
        return "elevated"
    if systolic < 90 or diastolic < 60:
        return "low"
    return "normal"


def classify_blood_pressure(systolic: float, diastolic: float) -> tuple[dict, str]:
    category = blood_pressure_category(systolic, diastolic)
    return {"category": category}, BLOOD_PRESSURE_ADVICE[category]


def calculate_target_heart_rate(age: float) -> tuple[dict, None]:
    """Maximum heart rate and training zones; there is no advice for this one."""

    max_heart_rate = 220 - age
    result: dict = {"maxHeartRate": max_heart_rate}
    for name, (low, high) in HEART_RATE_ZONES.items():
        result[name] = {
            "min": round_half_up(max_heart_rate * low),
            "max": round_half_up(max_heart_rate * high),
        }
    return result, None


def calculate_sli(
    age: float, exercise_heart_rate: float, resting_heart_rate: float, duration: float
) -> tuple[dict, str]:
    """Cardiac load index: heart-rate reserve used, times minutes, per year of age."""

    reserve = exercise_heart_rate - resting_heart_rate
    sli = round_half_up(reserve * duration / max(age, 1), 1)
    return {"sli": sli}, _band(sli, SLI_ADVICE)


def calculate_calorie_needs(
    gender: str, age: float, height: float, weight: float, activity_level: str
) -> tuple[dict, None]:
    bmr = round_half_up(basal_metabolic_rate(gender, age, height, weight))
    maintenance = round_half_up(bmr * ACTIVITY_MULTIPLIERS[activity_level])
    return {
        "maintenance": maintenance,
        "deficit": max(maintenance - 500, 0),
        "surplus": maintenance + 300,
    }, None
