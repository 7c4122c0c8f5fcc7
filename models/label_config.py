"""Label sheet configuration data models with JSON serialization."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import math


# Column that carries the per-record repeat count
LABEL_COUNT_COLUMN = "LabelCount"

# Columns never shown on a label
RESERVED_COLUMNS = {"id", "manualSort"}
RESERVED_PREFIX = "_"

ALIGNMENTS = ("left", "center", "right")
FONT_WEIGHTS = ("normal", "bold")

# Default stacking of newly added fields (percent of the label)
DEFAULT_X = 5.0
DEFAULT_Y = 5.0
Y_STEP = 15.0


@dataclass(frozen=True)
class Template:
    """One sheet layout from the label catalog."""
    id: str
    name: str
    per_page: int
    columns: int
    label_width: float   # inches
    label_height: float  # inches

    @property
    def rows(self) -> int:
        return -(-self.per_page // self.columns)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "perPage": self.per_page,
            "columns": self.columns,
            "labelWidth": self.label_width,
            "labelHeight": self.label_height,
        }


TEMPLATES: List[Template] = [
    Template("labels8", '8 per sheet (2-1/3" x 3-3/8")', 8, 2, 3.375, 2.333),
    Template("labels10", '10 per sheet (2" x 4")', 10, 2, 4.0, 2.0),
    Template("labels20", '20 per sheet (1" x 4")', 20, 2, 4.0, 1.0),
    Template("labels30", '30 per sheet (1" x 2-5/8")', 30, 3, 2.625, 1.0),
    Template("labels60", '60 per sheet (1/2" x 1-3/4")', 60, 4, 1.75, 0.5),
    Template("labels80", '80 per sheet (1/2" x 1-3/4")', 80, 4, 1.75, 0.5),
]

DEFAULT_TEMPLATE_ID = "labels30"


def find_template(template_id: Optional[str]) -> Optional[Template]:
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    return None


def default_template() -> Template:
    return find_template(DEFAULT_TEMPLATE_ID)


@dataclass
class Position:
    """Field anchor, in percent of the label box."""
    x: float = DEFAULT_X
    y: float = DEFAULT_Y

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass
class Formatting:
    """Text style of one field."""
    font_size: float = 11
    color: str = "#000000"
    align: str = "left"  # "left", "center", "right"
    font_weight: str = "normal"  # "normal", "bold"

    def to_dict(self) -> dict:
        return {
            "fontSize": self.font_size,
            "color": self.color,
            "align": self.align,
            "fontWeight": self.font_weight,
        }

    def copy(self) -> "Formatting":
        return Formatting(self.font_size, self.color, self.align, self.font_weight)


@dataclass
class ColumnLayoutEntry:
    """Persisted position and style of one column across all labels."""
    name: str
    position: Position = field(default_factory=Position)
    formatting: Formatting = field(default_factory=Formatting)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "position": self.position.to_dict(),
            "formatting": self.formatting.to_dict(),
        }


# Persisted option key for each Options attribute
OPTION_KEYS = {
    "template_id": "template",
    "blanks": "blanks",
    "font_size": "fontSize",
    "font_color": "fontColor",
    "text_align": "textAlign",
    "line_spacing": "lineSpacing",
    "separator": "separator",
    "show_field_names": "showFieldNames",
    "column_config": "columnConfig",
    "visual_editor_mode": "visualEditorMode",
}


@dataclass
class Options:
    """Complete label settings: sheet template, global style, field layout."""
    template_id: str = DEFAULT_TEMPLATE_ID
    # Labels left empty at the start of the first sheet
    blanks: int = 0
    font_size: float = 11
    font_color: str = "#000000"
    text_align: str = "left"
    line_spacing: float = 1.2
    separator: str = ", "
    show_field_names: bool = False
    column_config: List[ColumnLayoutEntry] = field(default_factory=list)
    visual_editor_mode: bool = False

    @property
    def template(self) -> Template:
        return find_template(self.template_id) or default_template()

    def default_formatting(self) -> Formatting:
        """Formatting given to fields that have no saved style yet."""
        return Formatting(
            font_size=self.font_size,
            color=self.font_color,
            align=self.text_align if self.text_align in ALIGNMENTS else "left",
            font_weight="normal",
        )

    def find_entry(self, name: str) -> Optional[ColumnLayoutEntry]:
        for entry in self.column_config:
            if entry.name == name:
                return entry
        return None

    def option_value(self, attr: str) -> Any:
        """JSON-ready value of one option, as written to the persistence sink."""
        if attr == "column_config":
            return [entry.to_dict() for entry in self.column_config]
        if attr == "template_id":
            return self.template.id
        return getattr(self, attr)

    def to_dict(self) -> dict:
        return {key: self.option_value(attr) for attr, key in OPTION_KEYS.items()}

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "Options":
        """Read saved options; missing or empty values fall back to defaults."""
        if not d:
            return cls()
        # Deferred: column_layout imports this module
        from models.column_layout import upgrade_config

        template = find_template(d.get("template") or d.get("templateId")) or default_template()
        options = cls(
            template_id=template.id,
            blanks=_as_int(d.get("blanks")) or 0,
            font_size=_as_float(d.get("fontSize")) or 11,
            font_color=d.get("fontColor") or "#000000",
            text_align=d.get("textAlign") or "left",
            line_spacing=_as_float(d.get("lineSpacing")) or 1.2,
            separator=d.get("separator") or ", ",
            show_field_names=d.get("showFieldNames") is True,
            visual_editor_mode=d.get("visualEditorMode") is True,
        )
        options.column_config = upgrade_config(d.get("columnConfig"), options.default_formatting())
        return options

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_json(cls, path: str) -> "Options":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return cls.from_dict(data)


def _as_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_float(value: Any) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) and result > 0 else 0.0
