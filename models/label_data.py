"""Per-label values produced by an expansion pass. Never persisted."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from models.label_config import Formatting, Position


class FieldType(str, Enum):
    NUMERIC = "Numeric"
    DATE = "Date"
    TEXT = "Text"


@dataclass
class Field:
    """One record value resolved for one label."""
    name: str
    value: Any
    type: FieldType = FieldType.TEXT
    column_id: str = ""
    row_id: Any = None
    position: Position = field(default_factory=Position)
    formatting: Formatting = field(default_factory=Formatting)

    def to_dict(self) -> dict:
        from utils.value_format import format_field

        return {
            "name": self.name,
            "value": self.value if isinstance(self.value, (str, int, float, bool, type(None))) else str(self.value),
            "text": format_field(self),
            "type": self.type.value,
            "columnId": self.column_id,
            "rowId": self.row_id,
            "position": self.position.to_dict(),
            "formatting": self.formatting.to_dict(),
        }


@dataclass
class LabelInstance:
    """One printable label: one repeat of one source record."""
    fields: List[Field]
    row_index: int
    row_id: Any = None

    def find_field(self, column_id: str) -> Optional[Field]:
        for f in self.fields:
            if f.column_id == column_id:
                return f
        return None

    def to_dict(self) -> dict:
        return {
            "fields": [f.to_dict() for f in self.fields],
            "rowIndex": self.row_index,
            "rowId": self.row_id,
        }
