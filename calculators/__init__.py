"""Health metric calculators."""

from .registry import CalculationResult, is_known_kind, run_calculation
from .schemas import CALCULATOR_SCHEMAS, validate_calculator_input

__all__ = [
    "CALCULATOR_SCHEMAS",
    "CalculationResult",
    "is_known_kind",
    "run_calculation",
    "validate_calculator_input",
]
