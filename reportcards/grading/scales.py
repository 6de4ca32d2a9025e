# reportcards/grading/scales.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

# Used when a school has no active grade scales configured.
DEFAULT_GRADE_SCALES = [
    {"grade": "A1", "min_percentage": 91, "max_percentage": 100},
    {"grade": "A2", "min_percentage": 81, "max_percentage": 90},
    {"grade": "B1", "min_percentage": 71, "max_percentage": 80},
    {"grade": "B2", "min_percentage": 61, "max_percentage": 70},
    {"grade": "C1", "min_percentage": 51, "max_percentage": 60},
    {"grade": "C2", "min_percentage": 41, "max_percentage": 50},
    {"grade": "D", "min_percentage": 33, "max_percentage": 40},
    {"grade": "E", "min_percentage": 0, "max_percentage": 32},
]


@dataclass(frozen=True)
class NormalizedGradeScale:
    """A grade band expressed in percentage units."""

    grade: str
    lower: float
    upper: float
    has_lower: bool = True
    has_upper: bool = True

    def contains(self, percentage: float) -> bool:
        return self.lower <= percentage <= self.upper


def _field(scale: Any, name: str) -> Any:
    if isinstance(scale, dict):
        return scale.get(name)
    return getattr(scale, name, None)


def _first_number(*values: Any) -> Optional[float]:
    for v in values:
        if v is None:
            continue
        try:
            return float(v)
        except (TypeError, ValueError):
            continue
    return None


def normalize_grade_scale(scale: Any) -> NormalizedGradeScale:
    # Percentage fields win; marks fields are read as the same 0-100 unit.
    lower = _first_number(_field(scale, "min_percentage"), _field(scale, "min_marks"))
    upper = _first_number(_field(scale, "max_percentage"), _field(scale, "max_marks"))
    return NormalizedGradeScale(
        grade=str(_field(scale, "grade") or "-"),
        lower=lower if lower is not None else 0.0,
        upper=upper if upper is not None else 100.0,
        has_lower=lower is not None,
        has_upper=upper is not None,
    )


def normalize_grade_scales(scales: Iterable[Any] | None) -> List[NormalizedGradeScale]:
    return [
        s if isinstance(s, NormalizedGradeScale) else normalize_grade_scale(s)
        for s in (scales or [])
    ]


def legend_order(scales: Iterable[Any] | None) -> List[NormalizedGradeScale]:
    """Sorted copy for display, highest band first. Lookup order is untouched."""
    normalized = normalize_grade_scales(scales)
    return sorted(normalized, key=lambda s: s.upper if s.has_upper else 0.0, reverse=True)
