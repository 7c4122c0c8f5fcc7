from pipeline.session import LabelSession, status_message


def test_transform_produces_pages_and_clean_status(records):
    session = LabelSession()
    pages, status = session.transform(records, {"template": "labels8", "blanks": 1})
    assert status == ""
    assert len(pages) == 1
    assert pages[0][0] is None
    assert [label.row_index for label in pages[0][1:5]] == [0, 0, 1, 2]
    assert session.row_indices == [0, 0, 1, 2]


def test_empty_record_set_reports_no_data():
    session = LabelSession()
    pages, status = session.transform([], None)
    assert status == "No data. Please add some rows"
    assert session.label_data is None
    assert pages == []


def test_only_system_columns_reports_missing_columns():
    session = LabelSession()
    _, status = session.transform([{"id": 1, "manualSort": 1, "_x": 2}], None)
    assert status.startswith("Please select columns to display")
    assert session.label_data is None


def test_error_clears_stale_labels(records):
    session = LabelSession()
    session.transform(records, None)
    assert session.label_data
    session.on_records([])
    assert session.label_data is None
    assert session.pages == []


def test_unexpected_errors_become_status(records, monkeypatch):
    import pipeline.session as session_module

    def boom(*args, **kwargs):
        raise RuntimeError("Error: layout exploded")

    monkeypatch.setattr(session_module, "expand_records", boom)
    session = LabelSession()
    _, status = session.transform(records, None)
    assert status == "layout exploded"
    assert not session.guard.held


def test_status_message_strips_generic_prefix():
    assert status_message(ValueError("Error: bad thing")) == "bad thing"
    assert status_message(ValueError("")) == "ValueError"


def test_options_before_records_do_not_run_pipeline(session):
    session.on_options({"fontSize": 14})
    assert session.status == "waiting"
    assert session.label_data is None


def test_reconciled_layout_is_saved_once(session, sink, records):
    session.on_records(records)
    layout_writes = [value for key, value in sink.writes if key == "columnConfig"]
    assert len(layout_writes) == 1
    assert [entry["name"] for entry in layout_writes[0]] == ["Name", "Qty", "Due"]

    session.on_records(records)
    assert len([key for key, _ in sink.writes if key == "columnConfig"]) == 1


def test_nested_trigger_from_save_is_dropped(records):
    nested = []
    session = None

    def set_option(key, value):
        # The host would notify the session synchronously
        nested.append(session.update_records())

    session = LabelSession(set_option=set_option)
    assert session.transform(records, None)[1] == ""
    assert nested == [False]
    assert not session.guard.held
    # Outside of a pass the pipeline runs again
    assert session.update_records() is True


def test_layout_change_survives_schema_drift(session, sink, records):
    session.on_records(records)
    saved = [dict(entry) for entry in sink.options["columnConfig"]]
    saved[0] = dict(saved[0], position={"x": 60, "y": 80})
    sink.set_option("columnConfig", saved)

    for record in records:
        record["City"] = "Paris"
        del record["Due"]
    session.on_records(records)

    config = {entry["name"]: entry for entry in sink.options["columnConfig"]}
    assert list(config) == ["Name", "Qty", "City"]
    assert config["Name"]["position"] == {"x": 60, "y": 80}
    assert config["City"]["position"] == {"x": 5, "y": 95}


def test_save_writes_every_option(session, sink):
    session.on_options({"template": "labels10", "blanks": 3, "separator": " / "})
    sink.writes.clear()
    session.save()
    keys = [key for key, _ in sink.writes]
    assert keys == ["template", "blanks", "fontSize", "fontColor", "textAlign", "lineSpacing",
                    "separator", "showFieldNames", "columnConfig", "visualEditorMode"]
    assert sink.options["template"] == "labels10"
    assert sink.options["blanks"] == 3
    assert sink.options["separator"] == " / "


def test_none_options_revert_to_defaults(session):
    session.on_options({"template": "labels10", "fontSize": 20})
    session.on_options(None)
    assert session.options.template.id == "labels30"
    assert session.options.font_size == 11


def test_unknown_template_falls_back_to_default(session):
    session.on_options({"template": "labels999"})
    assert session.options.template.per_page == 30


def test_transform_keeps_its_options_when_the_sink_echoes(session, sink, records):
    pages, status = session.transform(records, {"template": "labels8", "blanks": 1})
    assert status == ""
    assert session.options.template.id == "labels8"
    assert session.options.blanks == 1
    assert len(pages[0]) == 8
    assert pages[0][0] is None
    # The reconciled layout still reached the sink
    assert [entry["name"] for entry in sink.options["columnConfig"]] == ["Name", "Qty", "Due"]
