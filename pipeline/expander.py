"""Expanding records into label instances."""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Sequence

from models.label_config import (
    LABEL_COUNT_COLUMN, RESERVED_COLUMNS, RESERVED_PREFIX,
    ColumnLayoutEntry, Formatting, Position,
)
from models.label_data import Field, LabelInstance
from pipeline.errors import NoColumnsSelectedError, NoDataError
from utils.value_format import infer_type, parse_float_prefix

logger = logging.getLogger(__name__)


@dataclass
class Expansion:
    labels: List[LabelInstance] = field(default_factory=list)
    # Source record index of each label, parallel to ``labels``
    row_indices: List[int] = field(default_factory=list)
    available_columns: List[str] = field(default_factory=list)


def is_label_column(name: str, count_column: str = LABEL_COUNT_COLUMN) -> bool:
    return (
        name != count_column
        and name not in RESERVED_COLUMNS
        and not name.startswith(RESERVED_PREFIX)
    )


def label_columns(records: Sequence[Mapping[str, Any]], count_column: str = LABEL_COUNT_COLUMN) -> List[str]:
    """Columns shown on labels, in the order of the first record."""
    if not records:
        raise NoDataError()
    columns = [name for name in records[0].keys() if is_label_column(str(name), count_column)]
    if not columns:
        raise NoColumnsSelectedError()
    return columns


def repeat_count(value: Any) -> int:
    """Labels to print for one record. Anything unusable means one label."""
    count = parse_float_prefix(value)
    if count is None or not math.isfinite(count) or count <= 0:
        return 1
    return max(int(count), 1)


def expand_records(
    records: Sequence[Mapping[str, Any]],
    column_config: Sequence[ColumnLayoutEntry],
    defaults: Formatting,
    count_column: str = LABEL_COUNT_COLUMN,
) -> Expansion:
    columns = label_columns(records, count_column)
    layout = {entry.name: entry for entry in column_config}
    have_counts = count_column in records[0]

    expansion = Expansion(available_columns=columns)
    for row_index, record in enumerate(records):
        count = repeat_count(record.get(count_column)) if have_counts else 1
        row_id = record.get("id")
        for _ in range(count):
            fields = []
            for name in columns:
                value = record.get(name)
                entry = layout.get(name)
                if entry is None:
                    logger.debug("No layout entry for column %r, using defaults", name)
                    position, formatting = Position(), defaults.copy()
                else:
                    position = Position(entry.position.x, entry.position.y)
                    formatting = entry.formatting.copy()
                fields.append(Field(
                    name=name,
                    value=value,
                    type=infer_type(value),
                    column_id=name,
                    row_id=row_id,
                    position=position,
                    formatting=formatting,
                ))
            expansion.labels.append(LabelInstance(fields=fields, row_index=row_index, row_id=row_id))
            expansion.row_indices.append(row_index)

    logger.debug("Expanded %d records into %d labels", len(records), len(expansion.labels))
    return expansion
