"""Type inference and display formatting of record values."""

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional

from models.label_data import Field, FieldType, LabelInstance

# Layouts tried after ISO 8601, in order
DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%a, %d %b %Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%B %Y",
    "%b %Y",
)

# Leading number, as accepted by a lenient float reader
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:inf(?:inity)?|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))", re.IGNORECASE)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def parse_float(value: Any) -> Optional[float]:
    """Strict float parse. None for anything that is not entirely a number."""
    if _is_number(value):
        result = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            result = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(result) else result


def parse_float_prefix(value: Any) -> Optional[float]:
    """Lenient float parse: reads the leading number of a string ("3 boxes" -> 3.0)."""
    if _is_number(value):
        result = float(value)
        return None if math.isnan(result) else result
    if not isinstance(value, str):
        return None
    match = _FLOAT_PREFIX.match(value)
    if not match:
        return None
    return float(match.group(1))


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def infer_type(value: Any) -> FieldType:
    """Numeric before Date, so numeric strings are never read as dates."""
    if value is None:
        return FieldType.TEXT
    if _is_number(value) or parse_float(value) is not None:
        return FieldType.NUMERIC
    if isinstance(value, (date, datetime)):
        return FieldType.DATE
    if isinstance(value, str) and parse_date(value) is not None:
        return FieldType.DATE
    return FieldType.TEXT


def format_number(num: float) -> str:
    if math.isinf(num):
        return "Infinity" if num > 0 else "-Infinity"
    if num == int(num):
        return str(int(num))
    return f"{num:.2f}".rstrip("0").rstrip(".")


def format_short_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def format_field(field: Field) -> str:
    value = field.value
    if value is None:
        return ""
    if field.type == FieldType.NUMERIC:
        num = parse_float(value)
        return str(value) if num is None else format_number(num)
    if field.type == FieldType.DATE:
        parsed = parse_date(value)
        return str(value) if parsed is None else format_short_date(parsed)
    return str(value)


def label_text(label: Optional[LabelInstance], options) -> str:
    """Whole label as plain text, for layouts without per-field positions."""
    if not label or not label.fields:
        return ""
    parts: List[str] = []
    for f in label.fields:
        if options.show_field_names and f.name:
            parts.append(f"{f.name}: {format_field(f)}")
        else:
            parts.append(format_field(f))
    separator = "\n" if options.show_field_names else (options.separator or "\n")
    return separator.join(parts)


def label_style(options) -> dict:
    return {
        "fontSize": f"{format_number(float(options.font_size))}pt",
        "color": options.font_color,
        "textAlign": options.text_align,
        "lineHeight": options.line_spacing,
    }
