"""Visual editor: selecting, dragging and styling one field at a time."""

import logging
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from models.label_config import ALIGNMENTS, FONT_WEIGHTS, Formatting, Position
from models.label_data import Field, LabelInstance
from pipeline.errors import EditSessionError
from utils.geometry import Box, moved_position

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

FORMATTING_FIELDS = ("font_size", "color", "align", "font_weight")


class EditState(str, Enum):
    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING = "dragging"


class PositionEditSession:
    """Drag-to-position and style edits for the fields of a ``LabelSession``.

    Positions are written to the dragged Field, the column's layout entry
    and the selected field on every move; the layout is saved when the
    pointer is released. Only one field can be dragged at a time.
    """

    def __init__(self, session):
        self.session = session
        self.selected: Optional[Field] = None

        # Drag state
        self._drag_field: Optional[Field] = None
        self._drag_box: Optional[Box] = None
        self._drag_start_pointer: Point = (0.0, 0.0)
        self._drag_start_position: Optional[Position] = None

    @property
    def dragging(self) -> bool:
        return self._drag_field is not None

    @property
    def state(self) -> EditState:
        if self.dragging:
            return EditState.DRAGGING
        if self.selected is not None:
            return EditState.SELECTED
        return EditState.IDLE

    @property
    def editor_mode(self) -> bool:
        return self.session.options.visual_editor_mode

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, field: Field) -> bool:
        """Select a field for editing. Ignored while a drag is in progress."""
        if self.dragging:
            return False
        self.selected = field
        return True

    def deselect(self) -> None:
        self.selected = None

    def close(self) -> None:
        self.deselect()

    def rebind(self, labels: Iterable[LabelInstance]) -> None:
        """Point the selection at the matching field of freshly expanded labels."""
        if self.selected is None:
            return
        column_id, row_id = self.selected.column_id, self.selected.row_id
        self.selected = None
        for label in labels:
            if label.row_id == row_id:
                self.selected = label.find_field(column_id)
                if self.selected is not None:
                    return

    # ------------------------------------------------------------------
    # Drag-and-drop
    # ------------------------------------------------------------------

    def start_drag(self, field: Field, box: Box, pointer: Point) -> None:
        if self.dragging:
            raise EditSessionError("Another field is already being dragged")
        self._drag_field = field
        self._drag_box = box
        self._drag_start_pointer = (float(pointer[0]), float(pointer[1]))
        self._drag_start_position = Position(field.position.x, field.position.y)

    def move(self, pointer: Point) -> Position:
        if not self.dragging:
            raise EditSessionError("No field is being dragged")
        position = moved_position(
            self._drag_start_position, self._drag_start_pointer, pointer, self._drag_box
        )
        column_id = self._drag_field.column_id
        self._drag_field.position = Position(position.x, position.y)
        entry = self.session.options.find_entry(column_id)
        if entry is not None:
            entry.position = Position(position.x, position.y)
            self.session.layout_edited = True
        if self.selected is not None and self.selected.column_id == column_id:
            self.selected.position = Position(position.x, position.y)
        return position

    def end_drag(self) -> Optional[Position]:
        """Commit the dragged position. A release without a drag is ignored."""
        if not self.dragging:
            return None
        field = self._drag_field
        position = Position(field.position.x, field.position.y)
        self._drag_field = None
        self._drag_box = None
        self._drag_start_position = None

        for other in self._fields_of(field.column_id):
            other.position = Position(position.x, position.y)
        logger.info("Moved field %r to (%s, %s)", field.column_id, position.x, position.y)
        self.session.save_option("column_config")
        self.session.refresh_if_stale()
        return position

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def update_formatting(self, **changes) -> Formatting:
        """Restyle the selected field's column on every label."""
        if self.selected is None:
            raise EditSessionError("No field selected")
        unknown = set(changes) - set(FORMATTING_FIELDS)
        if unknown:
            raise EditSessionError(f"Unknown formatting: {', '.join(sorted(unknown))}")
        if "align" in changes and changes["align"] not in ALIGNMENTS:
            raise EditSessionError(f"Invalid alignment: {changes['align']!r}")
        if "font_weight" in changes and changes["font_weight"] not in FONT_WEIGHTS:
            raise EditSessionError(f"Invalid font weight: {changes['font_weight']!r}")
        if "font_size" in changes:
            try:
                changes["font_size"] = float(changes["font_size"])
            except (TypeError, ValueError):
                raise EditSessionError(f"Invalid font size: {changes['font_size']!r}")

        column_id = self.selected.column_id
        entry = self.session.options.find_entry(column_id)
        formatting = (entry.formatting if entry is not None else self.selected.formatting).copy()
        for key, value in changes.items():
            setattr(formatting, key, value)

        if entry is not None:
            entry.formatting = formatting.copy()
            self.session.layout_edited = True
        self.selected.formatting = formatting.copy()
        for other in self._fields_of(column_id):
            other.formatting = formatting.copy()
        return formatting

    def save_formatting(self) -> None:
        self.session.save_option("column_config")
        self.deselect()

    # ------------------------------------------------------------------
    # Editor mode
    # ------------------------------------------------------------------

    def set_editor_mode(self, enabled: bool) -> None:
        if not enabled and self.dragging:
            self.end_drag()
        self.session.options.visual_editor_mode = bool(enabled)
        if not enabled:
            self.deselect()
        self.session.save_option("visual_editor_mode")
        if not enabled:
            self.session.update_records()

    def _fields_of(self, column_id: str) -> List[Field]:
        found = []
        for label in self.session.label_data or []:
            f = label.find_field(column_id)
            if f is not None:
                found.append(f)
        return found
