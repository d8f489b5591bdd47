"""Dispatch from a calculator kind to its schema and formula."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from . import formulas
from .schemas import validate_calculator_input


@dataclass(frozen=True)
class CalculationResult:
    kind: str
    inputs: dict[str, Any]
    result: dict[str, Any]
    advice: str | None

    def response_data(self) -> dict[str, Any]:
        """Result fields plus the advice string when the calculator has one."""

        data = dict(self.result)
        if self.advice is not None:
            data["advice"] = self.advice
        return data


_FORMULAS: dict[str, Callable[[dict], tuple[dict, str | None]]] = {
    "bmi": lambda v: formulas.calculate_bmi(v["height"], v["weight"]),
    "bmr": lambda v: formulas.calculate_bmr(
        v["gender"], v["age"], v["height"], v["weight"], v["activityLevel"]
    ),
    "body-fat": lambda v: formulas.calculate_body_fat(
        v["gender"], v["height"], v["waist"], v["hip"]
    ),
    "waist-hip": lambda v: formulas.calculate_waist_hip_ratio(
        v["gender"], v["waist"], v["hip"]
    ),
    "blood-pressure": lambda v: formulas.classify_blood_pressure(
        v["systolic"], v["diastolic"]
    ),
    "target-heart-rate": lambda v: formulas.calculate_target_heart_rate(v["age"]),
    "sli": lambda v: formulas.calculate_sli(
        v["age"], v["exerciseHeartRate"], v["restingHeartRate"], v["duration"]
    ),
    "calorie": lambda v: formulas.calculate_calorie_needs(
        v["gender"], v["age"], v["height"], v["weight"], v["activityLevel"]
    ),
}


def is_known_kind(kind: str) -> bool:
    return kind in _FORMULAS


def run_calculation(kind: str, payload: dict) -> CalculationResult:
    """Validate ``payload`` for ``kind`` and compute the metric.

    Raises ``KeyError`` for an unknown kind and ``ValidationError`` for bad input.
    """

    formula = _FORMULAS[kind]
    inputs = validate_calculator_input(kind, payload)
    result, advice = formula(inputs)
    return CalculationResult(kind=kind, inputs=inputs, result=result, advice=advice)
