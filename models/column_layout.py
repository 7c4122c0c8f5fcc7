"""Merging saved per-column layout with the columns currently available.

Saved layout comes from persisted options and may be in any historical
shape: a list of bare column names, entries missing ``position`` or
``formatting``, or something that is not a list at all. Everything is
upgraded to ``ColumnLayoutEntry`` once, here, so the rest of the code only
ever sees the structured form.
"""

import logging
import math
from numbers import Real
from typing import Any, Iterable, List

from models.label_config import (
    ALIGNMENTS, DEFAULT_X, DEFAULT_Y, FONT_WEIGHTS, Y_STEP,
    ColumnLayoutEntry, Formatting, Position,
)

logger = logging.getLogger(__name__)


class MalformedConfigError(ValueError):
    """A saved layout entry could not be read. Always recovered locally."""


def default_position(index: int) -> Position:
    """Stacked default: fields one under another, 15% apart."""
    return Position(x=DEFAULT_X, y=DEFAULT_Y + Y_STEP * index)


def default_entry(name: str, index: int, defaults: Formatting) -> ColumnLayoutEntry:
    return ColumnLayoutEntry(name=name, position=default_position(index), formatting=defaults.copy())


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedConfigError(f"not a number: {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise MalformedConfigError(f"not a finite number: {value!r}")
    return value


def _read_position(raw: Any, index: int) -> Position:
    if isinstance(raw, Position):
        return Position(raw.x, raw.y)
    if not isinstance(raw, dict):
        return default_position(index)
    try:
        return Position(x=_number(raw.get("x")), y=_number(raw.get("y")))
    except MalformedConfigError as exc:
        logger.debug("Replacing unreadable position %r: %s", raw, exc)
        return default_position(index)


def _read_formatting(raw: Any, defaults: Formatting) -> Formatting:
    if isinstance(raw, Formatting):
        return raw.copy()
    if not isinstance(raw, dict):
        return defaults.copy()
    fmt = defaults.copy()
    try:
        fmt.font_size = _number(raw["fontSize"])
    except (KeyError, MalformedConfigError):
        pass
    color = raw.get("color")
    if isinstance(color, str) and color:
        fmt.color = color
    if raw.get("align") in ALIGNMENTS:
        fmt.align = raw["align"]
    if raw.get("fontWeight") in FONT_WEIGHTS:
        fmt.font_weight = raw["fontWeight"]
    return fmt


def upgrade_entry(raw: Any, index: int, defaults: Formatting) -> ColumnLayoutEntry:
    """Bring one saved entry to the structured form.

    Raises MalformedConfigError when the entry has no usable column name.
    """
    if isinstance(raw, str):
        if not raw:
            raise MalformedConfigError("empty column name")
        return default_entry(raw, index, defaults)
    if isinstance(raw, ColumnLayoutEntry):
        raw = {"name": raw.name, "position": raw.position, "formatting": raw.formatting}
    if not isinstance(raw, dict):
        raise MalformedConfigError(f"unsupported entry type {type(raw).__name__}")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedConfigError(f"entry without a name: {raw!r}")
    return ColumnLayoutEntry(
        name=name,
        position=_read_position(raw.get("position"), index),
        formatting=_read_formatting(raw.get("formatting"), defaults),
    )


def upgrade_config(raw: Any, defaults: Formatting) -> List[ColumnLayoutEntry]:
    """Upgrade a saved layout list, dropping unreadable and duplicate entries."""
    if not isinstance(raw, (list, tuple)):
        if raw:
            logger.warning("Ignoring saved column layout of type %s", type(raw).__name__)
        return []
    entries: List[ColumnLayoutEntry] = []
    seen = set()
    for index, item in enumerate(raw):
        try:
            entry = upgrade_entry(item, index, defaults)
        except MalformedConfigError as exc:
            logger.warning("Dropping saved column layout entry: %s", exc)
            continue
        if entry.name in seen:
            continue
        seen.add(entry.name)
        entries.append(entry)
    return entries


def reconcile_column_config(
    available_columns: Iterable[str],
    previous_config: Any,
    defaults: Formatting,
) -> List[ColumnLayoutEntry]:
    """Return the layout for exactly ``available_columns``.

    Saved entries keep their position and formatting, new columns are
    stacked below the lowest saved field, and columns that are gone are
    dropped. Never raises.
    """
    columns = list(dict.fromkeys(available_columns))
    entries = upgrade_config(previous_config, defaults)

    if not entries:
        return [default_entry(name, index, defaults) for index, name in enumerate(columns)]

    known = {entry.name for entry in entries}
    new_columns = [name for name in columns if name not in known]
    if new_columns:
        next_y = max(entry.position.y for entry in entries) + Y_STEP
        for offset, name in enumerate(new_columns):
            entries.append(ColumnLayoutEntry(
                name=name,
                position=Position(x=DEFAULT_X, y=next_y + Y_STEP * offset),
                formatting=defaults.copy(),
            ))

    wanted = set(columns)
    entries = [entry for entry in entries if entry.name in wanted]

    present = {entry.name for entry in entries}
    for name in columns:
        if name not in present:
            logger.warning("Column %r missing after reconciliation, adding default layout", name)
            entries.append(default_entry(name, len(entries), defaults))
    return entries
