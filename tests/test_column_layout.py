from models.column_layout import reconcile_column_config, upgrade_config
from models.label_config import ColumnLayoutEntry, Formatting, Options, Position

DEFAULTS = Formatting(font_size=11, color="#000000", align="left", font_weight="normal")


def _summary(config):
    return [entry.to_dict() for entry in config]


def test_empty_config_gets_stacked_defaults():
    config = reconcile_column_config(["A", "B", "C"], [], DEFAULTS)
    assert [e.name for e in config] == ["A", "B", "C"]
    assert [(e.position.x, e.position.y) for e in config] == [(5, 5), (5, 20), (5, 35)]
    assert all(e.formatting == DEFAULTS for e in config)


def test_non_list_config_is_treated_as_missing():
    config = reconcile_column_config(["A"], {"oops": True}, DEFAULTS)
    assert _summary(config) == _summary(reconcile_column_config(["A"], None, DEFAULTS))


def test_reconciliation_is_idempotent():
    saved = [
        {"name": "A", "position": {"x": 40, "y": 60}, "formatting": {"fontSize": 14, "color": "#ff0000",
                                                                    "align": "center", "fontWeight": "bold"}},
        "B",
        {"name": "Z"},
    ]
    once = reconcile_column_config(["A", "B", "C"], saved, DEFAULTS)
    twice = reconcile_column_config(["A", "B", "C"], once, DEFAULTS)
    assert _summary(once) == _summary(twice)
    again_from_json = reconcile_column_config(["A", "B", "C"], _summary(once), DEFAULTS)
    assert _summary(again_from_json) == _summary(once)


def test_new_column_keeps_existing_customization():
    saved = [{"name": "A", "position": {"x": 42, "y": 30},
              "formatting": {"fontSize": 20, "color": "#123456", "align": "right", "fontWeight": "bold"}}]
    config = reconcile_column_config(["A", "B"], saved, DEFAULTS)

    a, b = config
    assert a.position == Position(42, 30)
    assert a.formatting == Formatting(20, "#123456", "right", "bold")
    assert b.name == "B"
    assert b.position == Position(5, 45)
    assert b.formatting == DEFAULTS


def test_several_new_columns_keep_their_order():
    saved = [{"name": "A", "position": {"x": 5, "y": 50}, "formatting": {}}]
    config = reconcile_column_config(["C", "A", "B"], saved, DEFAULTS)
    assert [e.name for e in config] == ["A", "C", "B"]
    assert [e.position.y for e in config] == [50, 65, 80]


def test_stale_entries_are_dropped():
    saved = [{"name": "A", "position": {"x": 5, "y": 5}}, {"name": "Z", "position": {"x": 5, "y": 20}}]
    config = reconcile_column_config(["A"], saved, DEFAULTS)
    assert [e.name for e in config] == ["A"]
    config = reconcile_column_config(["A"], config, DEFAULTS)
    assert [e.name for e in config] == ["A"]


def test_bare_string_entries_are_upgraded():
    config = reconcile_column_config(["A", "B"], ["A", "B"], DEFAULTS)
    assert _summary(config) == _summary(reconcile_column_config(["A", "B"], [], DEFAULTS))


def test_missing_position_or_formatting_gets_defaults():
    saved = [
        {"name": "A", "formatting": {"fontSize": 8}},
        {"name": "B", "position": {"x": 50, "y": "top"}},
    ]
    a, b = reconcile_column_config(["A", "B"], saved, DEFAULTS)
    assert a.position == Position(5, 5)
    assert a.formatting.font_size == 8
    assert a.formatting.color == DEFAULTS.color
    assert b.position == Position(5, 20)
    assert b.formatting == DEFAULTS


def test_invalid_formatting_values_fall_back_to_defaults():
    saved = [{"name": "A", "formatting": {"align": "justify", "fontWeight": 900, "color": ""}}]
    (a,) = reconcile_column_config(["A"], saved, DEFAULTS)
    assert a.formatting == DEFAULTS


def test_unreadable_entries_are_skipped_individually():
    saved = [42, {"position": {"x": 1, "y": 1}}, {"name": "A", "position": {"x": 70, "y": 10}}, None]
    config = reconcile_column_config(["A", "B"], saved, DEFAULTS)
    assert [e.name for e in config] == ["A", "B"]
    assert config[0].position == Position(70, 10)
    assert config[1].position == Position(5, 25)


def test_duplicate_names_keep_first_entry():
    saved = [{"name": "A", "position": {"x": 10, "y": 10}}, {"name": "A", "position": {"x": 90, "y": 90}}]
    config = upgrade_config(saved, DEFAULTS)
    assert len(config) == 1
    assert config[0].position == Position(10, 10)


def test_result_entries_are_new_objects():
    saved = [ColumnLayoutEntry("A")]
    config = reconcile_column_config(["A"], saved, DEFAULTS)
    config[0].position.x = 99
    assert saved[0].position.x == 5


def test_options_upgrade_column_config_on_load():
    options = Options.from_dict({"columnConfig": ["A", {"name": "B"}], "fontSize": 14})
    assert [e.name for e in options.column_config] == ["A", "B"]
    assert options.column_config[1].position == Position(5, 20)
    assert options.column_config[0].formatting.font_size == 14
