from __future__ import annotations

import json
from pathlib import Path

from artifacts.write import write_report
from check.run import analyze_source
from contract.artifacts import (
    DIAGNOSTICS_JSONL,
    FIXES_JSON,
    REPORT_SCHEMA_VERSION,
    build_diagnostic_id,
)
from contract.validation import validate_report
from registry import Registry, RegistryEntry, SymbolKind

_REGISTRY = Registry([RegistryEntry("Foo", "a::b", SymbolKind.FUNCTION)])


def _write_valid_report(d: Path) -> None:
    report = analyze_source(
        "use x::Foo;\n\nfn main() { Foo(); }\n", _REGISTRY, path="src/main.rs"
    )
    write_report(d, [report])


def _diagnostic_record(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "diagnostic_id": "diag:src/main.rs@L1:C1:unimported:Foo",
        "path": "src/main.rs",
        "span": {
            "start_byte": 0,
            "end_byte": 3,
            "start_line": 1,
            "start_col": 1,
            "end_line": 1,
            "end_col": 4,
        },
        "verdict": "unimported",
        "symbol": "Foo",
        "message": "`Foo` is not imported",
        "expected": ["a::b::Foo"],
    }
    record.update(overrides)
    return record


def test_build_diagnostic_id_normalizes_path() -> None:
    assert build_diagnostic_id("./src\\main.rs", 3, 7, "misimported", "Foo") == (
        "diag:src/main.rs@L3:C7:misimported:Foo"
    )


def test_written_report_is_valid(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)

    result = validate_report(tmp_path)

    assert result.ok
    assert result.warnings == []


def test_written_diagnostic_fields(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)

    (line,) = (tmp_path / DIAGNOSTICS_JSONL).read_text(encoding="utf-8").splitlines()
    record = json.loads(line)

    assert record["diagnostic_id"] == "diag:src/main.rs@L3:C13:misimported:Foo"
    assert record["verdict"] == "misimported"
    assert record["expected"] == ["a::b::Foo"]
    assert list(record) == sorted(record)


def test_written_fixes_fields(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)

    fixes = json.loads((tmp_path / FIXES_JSON).read_text(encoding="utf-8"))

    assert fixes["schema_version"] == REPORT_SCHEMA_VERSION
    (file_fixes,) = fixes["files"]
    assert file_fixes["path"] == "src/main.rs"
    assert file_fixes["edits"] == [
        {"end_byte": 11, "start_byte": 0, "text": "use a::b::Foo;"}
    ]


def test_report_written_twice_is_byte_identical(tmp_path: Path) -> None:
    _write_valid_report(tmp_path / "first")
    _write_valid_report(tmp_path / "second")

    for name in (DIAGNOSTICS_JSONL, FIXES_JSON):
        assert (tmp_path / "first" / name).read_bytes() == (
            tmp_path / "second" / name
        ).read_bytes()


def test_missing_report_dir(tmp_path: Path) -> None:
    result = validate_report(tmp_path / "missing")

    assert not result.ok
    assert result.errors[0].artifact == "report_dir"


def test_missing_fixes_file(tmp_path: Path) -> None:
    (tmp_path / DIAGNOSTICS_JSONL).write_text("", encoding="utf-8")

    result = validate_report(tmp_path)

    assert [error.artifact for error in result.errors] == ["fixes"]


def test_invalid_json_line(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)
    with (tmp_path / DIAGNOSTICS_JSONL).open("a", encoding="utf-8") as handle:
        handle.write("{not json\n")

    result = validate_report(tmp_path)

    assert not result.ok
    assert result.errors[0].line == 2
    assert "Invalid JSON" in result.errors[0].message


def test_schema_violation(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)
    record = _diagnostic_record()
    del record["span"]
    (tmp_path / DIAGNOSTICS_JSONL).write_text(json.dumps(record) + "\n")

    result = validate_report(tmp_path)

    assert not result.ok
    assert "Schema validation failed" in result.errors[0].message


def test_schema_version_mismatch(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)
    record = _diagnostic_record(schema_version=REPORT_SCHEMA_VERSION + 1)
    (tmp_path / DIAGNOSTICS_JSONL).write_text(json.dumps(record) + "\n")

    result = validate_report(tmp_path)

    assert not result.ok
    assert "Schema version mismatch" in result.errors[0].message


def test_duplicate_diagnostic_id_warns(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)
    line = json.dumps(_diagnostic_record())
    (tmp_path / DIAGNOSTICS_JSONL).write_text(f"{line}\n{line}\n")

    result = validate_report(tmp_path)

    assert result.ok
    assert len(result.warnings) == 1


def test_overlapping_fix_edits_rejected(tmp_path: Path) -> None:
    _write_valid_report(tmp_path)
    fixes = {
        "schema_version": REPORT_SCHEMA_VERSION,
        "files": [
            {
                "path": "src/main.rs",
                "edits": [
                    {"start_byte": 0, "end_byte": 10, "text": "a"},
                    {"start_byte": 5, "end_byte": 12, "text": "b"},
                ],
            }
        ],
    }
    (tmp_path / FIXES_JSON).write_text(json.dumps(fixes))

    result = validate_report(tmp_path)

    assert not result.ok
    assert "overlapping" in result.errors[0].message
