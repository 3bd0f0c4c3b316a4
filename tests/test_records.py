import gzip
import io
import json

import pytest

from sortsmith.core.records import (
    RecordWriter,
    detect_format,
    iter_jsonl_records,
    read_records,
    write_records,
)


def test_detect_format():
    assert detect_format("data.json") == "json"
    assert detect_format("data.JSON.gz") == "json"
    assert detect_format("data.jsonl") == "jsonl"
    assert detect_format("data.jsonl.gz") == "jsonl"
    assert detect_format("data") == "jsonl"


def test_iter_jsonl_skips_blank_lines():
    fp = io.StringIO('{"a": 1}\n\n  \n[2]\n"three"\n')

    assert list(iter_jsonl_records(fp)) == [{"a": 1}, [2], "three"]


def test_iter_jsonl_reports_bad_line():
    fp = io.StringIO('{"a": 1}\n{oops\n')

    with pytest.raises(ValueError, match=r"Invalid JSON at src.jsonl:#2"):
        list(iter_jsonl_records(fp, source="src.jsonl"))


def test_read_json_array(tmp_path):
    path = tmp_path / "in.json"
    path.write_text(json.dumps([{"n": 2}, {"n": 1}]), encoding="utf-8")

    assert read_records(path) == [{"n": 2}, {"n": 1}]


def test_read_json_requires_array(tmp_path):
    path = tmp_path / "in.json"
    path.write_text(json.dumps({"n": 1}), encoding="utf-8")

    with pytest.raises(ValueError, match="must hold a JSON array"):
        read_records(path)


def test_read_gzip_jsonl(tmp_path):
    path = tmp_path / "in.jsonl.gz"
    with gzip.open(path, "wt", encoding="utf-8") as fp:
        fp.write('{"n": 1}\n{"n": 2}\n')

    assert read_records(path) == [{"n": 1}, {"n": 2}]


def test_read_records_format_override(tmp_path):
    path = tmp_path / "records.txt"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    assert read_records(path, fmt="json") == [1, 2, 3]
    with pytest.raises(ValueError, match="Unsupported record format"):
        read_records(path, fmt="csv")


def test_read_records_from_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO('{"n": 1}\n'))

    assert read_records("-") == [{"n": 1}]


def test_write_jsonl_to_file(tmp_path):
    out = tmp_path / "nested" / "out.jsonl"

    count = write_records([{"n": 1}, {"n": "é"}], out)

    assert count == 2
    assert out.read_text(encoding="utf-8").splitlines() == ['{"n":1}', '{"n":"é"}']
    assert not (tmp_path / "nested" / "out.jsonl.tmp").exists()


def test_write_json_array_to_gzip(tmp_path):
    out = tmp_path / "out.json.gz"

    write_records([1, 2], out)

    with gzip.open(out, "rt", encoding="utf-8") as fp:
        assert json.load(fp) == [1, 2]


def test_write_records_to_stream():
    buf = io.StringIO()

    assert write_records([{"a": 1}, [2]], stream=buf) == 2
    assert buf.getvalue() == '{"a":1}\n[2]\n'

    buf = io.StringIO()
    write_records([{"a": 1}], stream=buf, fmt="json")
    assert json.loads(buf.getvalue()) == [{"a": 1}]


def test_record_writer_discards_on_error(tmp_path):
    out = tmp_path / "out.jsonl"
    out.write_text("previous\n", encoding="utf-8")

    with pytest.raises(RuntimeError):
        with RecordWriter(out) as writer:
            writer.write({"n": 1})
            raise RuntimeError("boom")

    assert out.read_text(encoding="utf-8") == "previous\n"
    assert not (tmp_path / "out.jsonl.tmp").exists()


def test_record_writer_rejects_unknown_format(tmp_path):
    with pytest.raises(ValueError):
        RecordWriter(tmp_path / "out.csv", fmt="csv")


def test_record_writer_removes_temp_file_when_json_encoding_fails(tmp_path):
    out = tmp_path / "out.json"

    with pytest.raises(TypeError):
        with RecordWriter(out) as writer:
            writer.write({"ok": 1})
            writer.write({"bad": object()})

    assert not out.exists()
    assert not (tmp_path / "out.json.tmp").exists()
