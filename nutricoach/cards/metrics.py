# -*- coding: utf-8 -*-
"""
Body metrics

Calculations embedded in the health assessment card.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

DEFAULT_HEIGHT_CM = 170.0
DEFAULT_WEIGHT_KG = 70.0
DEFAULT_AGE = 30
DEFAULT_GENDER = "male"

IDEAL_BMI = 22.5
PROTEIN_G_PER_KG = 1.4
SEDENTARY_FACTOR = 1.2


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator: 0.5 always goes up, regardless of float parity."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_bmi(weight_kg: float, height_cm: float) -> float:
    """BMI = weight / height(m)^2, one decimal."""
    height_m = height_cm / 100
    return round_half_up(weight_kg / (height_m * height_m), 1)


def calculate_bmr(weight_kg: float, height_cm: float, age: float, gender: str) -> int:
    """
    Basal metabolic rate (Mifflin-St Jeor)

    Args:
        weight_kg: body weight
        height_cm: height
        age: age in years
        gender: "male" uses the +5 constant; anything else uses -161

    Returns:
        int: kcal/day, rounded half-up
    """
    base = 10 * weight_kg + 6.25 * height_cm - 5 * age
    offset = 5 if gender == "male" else -161
    return int(round_half_up(base + offset))


def calculate_ideal_weight(height_cm: float) -> float:
    height_m = height_cm / 100
    return round_half_up(IDEAL_BMI * height_m * height_m, 1)


def calculate_protein_target(ideal_weight_kg: float) -> float:
    return round_half_up(ideal_weight_kg * PROTEIN_G_PER_KG, 1)


@dataclass
class BodyMetrics:
    height: float
    weight: float
    age: int
    gender: str
    bmi: float
    bmr: int
    ideal_weight: float
    calorie_intake: float
    protein_intake: float

    def key_findings(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("age")
        data.pop("gender")
        return data


def compute_body_metrics(
    *,
    height_cm: Optional[float] = None,
    weight_kg: Optional[float] = None,
    age: Optional[int] = None,
    gender: Optional[str] = None,
    target_kcal: Optional[float] = None,
) -> BodyMetrics:
    """Fill missing inputs with the defaults and derive every figure."""
    height = float(height_cm or DEFAULT_HEIGHT_CM)
    weight = float(weight_kg or DEFAULT_WEIGHT_KG)
    age = int(age or DEFAULT_AGE)
    gender = gender or DEFAULT_GENDER

    bmr = calculate_bmr(weight, height, age, gender)
    ideal = calculate_ideal_weight(height)
    calories = float(target_kcal) if target_kcal else round_half_up(bmr * SEDENTARY_FACTOR, 1)
    return BodyMetrics(
        height=height,
        weight=weight,
        age=age,
        gender=gender,
        bmi=calculate_bmi(weight, height),
        bmr=bmr,
        ideal_weight=ideal,
        calorie_intake=calories,
        protein_intake=calculate_protein_target(ideal),
    )
