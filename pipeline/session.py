"""Label session: turns records and saved options into pages of labels.

A ``LabelSession`` belongs to one label widget. The host calls
``on_records`` and ``on_options`` from its change notifications; the session
reconciles the saved column layout with the current columns, expands the
records into labels and keeps ``status`` and ``pages`` up to date for the
rendering layer.

Reconciling can change the saved layout, and saving it notifies the host,
which calls ``on_options`` again. The session's ``ReentrancyGuard`` drops
that nested pass.
"""

import logging
import re
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from models.column_layout import reconcile_column_config
from models.label_config import LABEL_COUNT_COLUMN, OPTION_KEYS, Options
from models.label_data import Field, LabelInstance
from pipeline.edit_session import PositionEditSession
from pipeline.errors import EditSessionError, LabelError
from pipeline.expander import expand_records, label_columns
from pipeline.guard import ReentrancyGuard
from pipeline.paginator import Page, arrange_labels

logger = logging.getLogger(__name__)

SetOption = Callable[[str, Any], None]

_ERROR_PREFIX = re.compile(r"^Error:\s*")


def status_message(exc: BaseException) -> str:
    """User-facing text for an error, without a generic ``Error:`` prefix."""
    message = _ERROR_PREFIX.sub("", str(exc))
    return message or type(exc).__name__


class LabelSession:
    """Holds the state of one label widget and runs the label pipeline."""

    def __init__(self, set_option: Optional[SetOption] = None,
                 count_column: str = LABEL_COUNT_COLUMN):
        self.options: Options = Options()
        self.records: Optional[List[Mapping[str, Any]]] = None
        self.label_data: Optional[List[LabelInstance]] = None
        self.row_indices: List[int] = []
        self.available_columns: List[str] = []
        self.status: str = "waiting"
        self.count_column = count_column

        self.guard = ReentrancyGuard()
        self.editor = PositionEditSession(self)

        self._set_option = set_option
        # Column layout as last seen in saved options
        self._saved_column_config: Any = None
        # A change arrived while a drag was in progress
        self._stale = False
        # Editor changes to the column layout not yet written to the sink
        self.layout_edited = False

    # ------------------------------------------------------------------
    # Change notifications
    # ------------------------------------------------------------------

    def on_options(self, raw: Optional[Mapping[str, Any]]) -> None:
        """Load saved options; None reverts to defaults.

        A notification that arrives while a pass is running echoes the
        pass's own write, so the options it runs with are kept. While the
        editor holds uncommitted layout edits the incoming options are
        merged around the current column layout.
        """
        self._saved_column_config = (raw or {}).get("columnConfig")
        if self.guard.held:
            return
        incoming = Options.from_dict(raw)
        if raw is None:
            self.layout_edited = False
        if self.layout_edited or self.editor.dragging:
            incoming.column_config = self.options.column_config
        self.options = incoming
        self._refresh()

    def on_records(self, records: Optional[Sequence[Mapping[str, Any]]]) -> None:
        self.records = list(records) if records is not None else None
        self._refresh()

    def transform(self, records: Sequence[Mapping[str, Any]],
                  options: Optional[Mapping[str, Any]]) -> Tuple[List[Page], str]:
        """Run the whole pipeline for one record set and options snapshot."""
        self.options = Options.from_dict(options)
        self._saved_column_config = (options or {}).get("columnConfig")
        self.layout_edited = False
        self.records = list(records)
        self.update_records()
        return self.pages, self.status

    def _refresh(self) -> None:
        if self.records is None:
            return
        if self.editor.dragging:
            self._stale = True
            return
        self.update_records()

    def refresh_if_stale(self) -> None:
        if self._stale and not self.editor.dragging:
            self.update_records()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def update_records(self) -> bool:
        """Rebuild labels from the current records and options.

        Returns False when the call was dropped because a pass is already
        running.
        """
        if not self.guard.try_acquire():
            logger.debug("Label update already in progress, skipping nested update")
            return False
        try:
            self._stale = False
            self.status = ""
            records = self.records or []
            defaults = self.options.default_formatting()

            columns = label_columns(records, self.count_column)
            config = reconcile_column_config(columns, self.options.column_config, defaults)
            self.options.column_config = config

            expansion = expand_records(records, config, defaults, self.count_column)
            self.available_columns = expansion.available_columns
            self.row_indices = expansion.row_indices
            self.label_data = expansion.labels
            self.editor.rebind(self.label_data)

            # Uncommitted editor changes are written by the editor's own commit
            if (not self.layout_edited
                    and self.options.option_value("column_config") != self._saved_column_config):
                logger.info("Column layout changed, saving %d entries", len(config))
                self.save_option("column_config")
        except Exception as exc:
            self.handle_error(exc)
        finally:
            self.guard.release()
        return True

    def handle_error(self, exc: Exception) -> None:
        if isinstance(exc, LabelError):
            logger.warning("Labels unavailable: %s", exc)
        else:
            logger.exception("Label update failed")
        self.label_data = None
        self.row_indices = []
        self.status = status_message(exc)

    @property
    def pages(self) -> List[Page]:
        if self.label_data is None:
            return []
        return arrange_labels(self.label_data, self.options.template, self.options.blanks)

    def field_at(self, label_index: int, column_id: str) -> Field:
        """Field of one expanded label, for the editor."""
        labels = self.label_data or []
        if label_index < 0 or label_index >= len(labels):
            raise EditSessionError(f"No label at index {label_index}")
        found = labels[label_index].find_field(column_id)
        if found is None:
            raise EditSessionError(f"Label {label_index} has no field {column_id!r}")
        return found

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save_option(self, attr: str) -> None:
        """Write one option to the persistence sink. Last write wins."""
        value = self.options.option_value(attr)
        if attr == "column_config":
            self._saved_column_config = value
            self.layout_edited = False
        self._write(OPTION_KEYS[attr], value)

    def save(self) -> None:
        """Write every option, one key at a time.

        Values are taken from a snapshot: each write may notify the host,
        which reloads ``self.options`` from the partly written store.
        """
        snapshot = self.options.to_dict()
        self._saved_column_config = snapshot["columnConfig"]
        self.layout_edited = False
        for key, value in snapshot.items():
            self._write(key, value)

    def _write(self, key: str, value: Any) -> None:
        if self._set_option is None:
            return
        try:
            self._set_option(key, value)
        except Exception:
            logger.exception("Could not save option %r", key)
