# reportcards/report/formatting.py
from typing import Optional, Union

Number = Union[int, float]


def fmt_number(value: Optional[Number], placeholder: str = "-") -> str:
    """45.0 -> '45', 45.5 -> '45.5', None -> placeholder."""
    if value is None:
        return placeholder
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def fmt_percent(value: Number, rounded: bool = False) -> str:
    if rounded:
        return f"{round(value):d}%"
    return f"{value:.1f}%"
