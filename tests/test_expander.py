import pytest

from models.column_layout import reconcile_column_config
from models.label_config import ColumnLayoutEntry, Formatting, Position
from models.label_data import FieldType
from pipeline.errors import NoColumnsSelectedError, NoDataError
from pipeline.expander import expand_records, label_columns, repeat_count

DEFAULTS = Formatting()


def test_label_columns_skip_reserved_and_count_columns():
    records = [{"id": 1, "manualSort": 1, "_internal": "x", "LabelCount": 2, "Name": "A", "City": "B"}]
    assert label_columns(records) == ["Name", "City"]


def test_label_columns_require_data():
    with pytest.raises(NoDataError) as exc:
        label_columns([])
    assert str(exc.value) == "No data. Please add some rows"


def test_label_columns_require_a_visible_column():
    with pytest.raises(NoColumnsSelectedError):
        label_columns([{"id": 1, "_hidden": 2, "LabelCount": 1}])


@pytest.mark.parametrize("value, expected", [
    (2, 2),
    ("3", 3),
    ("2 copies", 2),
    ("bad", 1),
    (0, 1),
    (-4, 1),
    (None, 1),
    ("", 1),
    (2.7, 2),
    (0.4, 1),
    (float("inf"), 1),
])
def test_repeat_count(value, expected):
    assert repeat_count(value) == expected


def test_repeat_expansion_counts(records):
    config = reconcile_column_config(label_columns(records), [], DEFAULTS)
    expansion = expand_records(records, config, DEFAULTS)
    assert expansion.row_indices == [0, 0, 1, 2]
    assert [label.row_id for label in expansion.labels] == [1, 1, 2, 3]
    assert expansion.available_columns == ["Name", "Qty", "Due"]


def test_records_without_count_column_get_one_label_each():
    records = [{"id": 10, "Name": "A"}, {"id": 11, "Name": "B", "LabelCount": 5}]
    expansion = expand_records(records, [], DEFAULTS)
    assert expansion.row_indices == [0, 1]


def test_repeats_are_distinct_instances(records):
    expansion = expand_records(records, [], DEFAULTS)
    first, second = expansion.labels[0], expansion.labels[1]
    assert first is not second
    assert first.fields[0] is not second.fields[0]
    assert [f.value for f in first.fields] == [f.value for f in second.fields]


def test_fields_carry_type_and_layout(records):
    config = [
        ColumnLayoutEntry("Name", Position(30, 40), Formatting(16, "#ff0000", "center", "bold")),
        ColumnLayoutEntry("Qty", Position(5, 60), Formatting()),
        ColumnLayoutEntry("Due", Position(5, 75), Formatting()),
    ]
    label = expand_records(records, config, DEFAULTS).labels[0]
    name, qty, due = label.fields
    assert (name.type, qty.type, due.type) == (FieldType.TEXT, FieldType.NUMERIC, FieldType.DATE)
    assert name.position == Position(30, 40)
    assert name.formatting.font_weight == "bold"
    assert name.column_id == "Name"
    assert name.row_id == 1
    # Fields own copies of the layout
    assert name.position is not config[0].position


def test_missing_layout_entry_uses_defaults():
    label = expand_records([{"id": 1, "Name": "A"}], [], Formatting(font_size=9)).labels[0]
    assert label.fields[0].formatting.font_size == 9
    assert label.fields[0].position == Position(5, 5)
