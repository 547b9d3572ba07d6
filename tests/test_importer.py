import json

import pytest

from statchain.exceptions import InvalidInput, IOFailure
from statchain.importer import read_batches


def test_read_csv(tmp_path):
    path = tmp_path / "data.csv"
    path.write_text("1,2,3\n4.5, 5.5\n\n-1e3\n", encoding="utf-8")
    assert read_batches(path, "csv") == [[1.0, 2.0, 3.0], [4.5, 5.5], [-1000.0]]


def test_read_json(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps([[1, 2], [3.5]]), encoding="utf-8")
    assert read_batches(str(path), "JSON") == [[1.0, 2.0], [3.5]]


def test_non_numeric_csv_cell(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("1,abc\n", encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_batches(path, "csv")


def test_non_numeric_json_value(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps([[1, "x"]]), encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_batches(path, "json")


def test_json_must_be_nested_arrays(tmp_path):
    path = tmp_path / "flat.json"
    path.write_text(json.dumps({"values": [1, 2]}), encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_batches(path, "json")


def test_malformed_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[[1, 2", encoding="utf-8")
    with pytest.raises(IOFailure):
        read_batches(path, "json")


def test_missing_file(tmp_path):
    with pytest.raises(IOFailure):
        read_batches(tmp_path / "missing.csv", "csv")


def test_unknown_format(tmp_path):
    with pytest.raises(InvalidInput):
        read_batches(tmp_path / "data.xml", "xml")


def test_json_integer_beyond_float_range(tmp_path):
    path = tmp_path / "huge.json"
    path.write_text("[[1, " + "9" * 400 + "]]", encoding="utf-8")
    with pytest.raises(InvalidInput):
        read_batches(path, "json")


def test_json_integer_literal_too_long(tmp_path):
    # exceeds the interpreter's int string conversion limit
    path = tmp_path / "too_long.json"
    path.write_text("[[1, " + "9" * 5000 + "]]", encoding="utf-8")
    with pytest.raises(IOFailure):
        read_batches(path, "json")
