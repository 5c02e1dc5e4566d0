# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the compatibility CLI."""

import io
import json
import logging
import re
from pathlib import Path

from cli.dcc_cli import REMEDIATION_SUGGESTIONS, run

OLD_USER = "\n".join(
    [
        "data class UserModel(",
        "    val id: String,",
        "    val name: String,",
        "    val email: String",
        ")",
    ]
)
NEW_USER_BREAKING = "\n".join(
    [
        "data class UserModel(",
        "    val id: String,",
        "    val age: Int,  // inserted without default",
        "    val name: String,",
        "    val email: String",
        ")",
    ]
)
NEW_USER_COMPATIBLE = "\n".join(
    [
        "data class UserModel(",
        "    val id: String,",
        "    val name: String,",
        "    val email: String?,",
        "    val age: Int = 0",
        ")",
    ]
)


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _run(argv: list[str]) -> tuple[int, str, str]:
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = run(argv, stdout=stdout, stderr=stderr)
    return exit_code, _strip_ansi(stdout.getvalue()), stderr.getvalue()


def test_cli_001_requires_two_positional_arguments(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    _write_file(old_file, OLD_USER)

    assert _run([])[0] == 1
    assert _run([str(old_file)])[0] == 1


def test_cli_002_fails_when_a_file_is_missing(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    _write_file(old_file, OLD_USER)

    exit_code, stdout, stderr = _run([str(old_file), str(tmp_path / "missing.kt")])

    assert exit_code == 1
    assert "Path does not exist" in stderr
    assert stdout == ""


def test_cli_003_fails_when_file_and_directory_are_mixed(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    _write_file(old_file, OLD_USER)
    (tmp_path / "dir").mkdir()

    exit_code, _, stderr = _run([str(old_file), str(tmp_path / "dir")])

    assert exit_code == 1
    assert "both be files or both be directories" in stderr


def test_cli_004_breaking_insertion_fails_with_suggestions(tmp_path: Path) -> None:
    old_file = tmp_path / "old" / "UserModel.kt"
    new_file = tmp_path / "new" / "UserModel.kt"
    _write_file(old_file, OLD_USER)
    _write_file(new_file, NEW_USER_BREAKING)

    exit_code, stdout, _ = _run([str(old_file), str(new_file)])

    assert exit_code == 1
    assert "Analyzing: UserModel" in stdout
    assert "[BREAKING] Field 'age' added at position 1 with no default value" in stdout
    assert "[WARNING] Field 'name' moved from position 1 to position 2" in stdout
    assert "Breaking changes detected" in stdout
    for suggestion in REMEDIATION_SUGGESTIONS:
        assert suggestion in stdout


def test_cli_005_compatible_change_passes(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    _write_file(old_file, OLD_USER)
    _write_file(new_file, NEW_USER_COMPATIBLE)

    exit_code, stdout, stderr = _run([str(old_file), str(new_file)])

    assert exit_code == 0
    assert "[SAFE] Field 'email' is now nullable (less restrictive)" in stdout
    assert "No breaking changes detected" in stdout
    assert "Suggestions:" not in stdout
    assert stderr == ""


def test_cli_006_unchanged_record_reports_no_breaking_changes(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    _write_file(old_file, OLD_USER)
    _write_file(new_file, OLD_USER)

    exit_code, stdout, _ = _run([str(old_file), str(new_file)])

    assert exit_code == 0
    assert "   No breaking changes" in stdout


def test_cli_007_no_data_classes_is_success(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    _write_file(old_file, "")
    _write_file(new_file, "fun main() = println(\"hi\")")

    exit_code, stdout, _ = _run([str(old_file), str(new_file)])

    assert exit_code == 0
    assert "No data classes found" in stdout


def test_cli_008_removed_record_fails_and_added_record_is_informational(
    tmp_path: Path,
) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    _write_file(old_file, "data class Legacy(val code: Int)")
    _write_file(new_file, "data class Fresh(val id: String)")

    exit_code, stdout, _ = _run([str(old_file), str(new_file)])

    assert exit_code == 1
    assert "[BREAKING] Data class 'Legacy' removed" in stdout
    assert "[ADDED] New data class added: Fresh" in stdout


def test_cli_009_json_output_on_stdout(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    _write_file(old_file, "data class Counter(val count: Int)")
    _write_file(new_file, "data class Counter(val count: Long)")

    exit_code, stdout, _ = _run([str(old_file), str(new_file), "--format", "json"])

    assert exit_code == 1
    payload = json.loads(stdout)
    assert payload["passed"] is False
    assert payload["suggestions"] == list(REMEDIATION_SUGGESTIONS)
    comparison = payload["sources"][0]["comparisons"][0]
    assert comparison["name"] == "Counter"
    assert comparison["status"] == "compared"
    assert comparison["findings"] == [
        {
            "severity": "BREAKING",
            "kind": "type_changed",
            "message": "Type of 'count' changed from Int to Long",
            "field_name": "count",
        }
    ]


def test_cli_010_json_output_file_is_written(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    output_path = tmp_path / "out" / "report.json"
    _write_file(old_file, OLD_USER)
    _write_file(new_file, OLD_USER)

    exit_code, stdout, _ = _run(
        [
            str(old_file),
            str(new_file),
            "--format",
            "json",
            "--output",
            str(output_path),
        ]
    )

    assert exit_code == 0
    assert stdout == ""
    payload = json.loads(output_path.read_text(encoding="utf-8"))
    assert payload["passed"] is True
    assert payload["suggestions"] == []


def test_cli_011_output_requires_json_format(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    _write_file(old_file, OLD_USER)

    exit_code, _, stderr = _run(
        [str(old_file), str(old_file), "--output", str(tmp_path / "r.json")]
    )

    assert exit_code == 1
    assert "--output requires --format json" in stderr


def test_cli_012_unreadable_source_is_reported(tmp_path: Path) -> None:
    old_file = tmp_path / "old.kt"
    new_file = tmp_path / "new.kt"
    _write_file(old_file, OLD_USER)
    new_file.write_bytes(b"\xff\xfe\x00data class")

    exit_code, stdout, stderr = _run([str(old_file), str(new_file)])

    assert exit_code == 1
    assert "Cannot read source file" in stderr
    assert stdout == ""


def test_cli_013_directory_mode_pairs_files_and_reports_labels(
    tmp_path: Path,
) -> None:
    old_root = tmp_path / "old"
    new_root = tmp_path / "new"
    _write_file(old_root / "models" / "UserModel.kt", OLD_USER)
    _write_file(new_root / "models" / "UserModel.kt", NEW_USER_COMPATIBLE)
    _write_file(new_root / "models" / "Session.kt", "data class Session(val id: String)")
    _write_file(old_root / "build" / "Gen.kt", "data class Gen(val x: Int)")

    exit_code, stdout, _ = _run(
        [str(old_root), str(new_root), "--exclude", "build/"]
    )

    assert exit_code == 0
    assert "models/UserModel.kt" in stdout
    assert "models/Session.kt" in stdout
    assert "New data class added: Session" in stdout
    assert "Gen" not in stdout


def test_cli_014_directory_mode_file_removed_from_new_tree_is_breaking(
    tmp_path: Path,
) -> None:
    old_root = tmp_path / "old"
    new_root = tmp_path / "new"
    _write_file(old_root / "UserModel.kt", OLD_USER)
    new_root.mkdir()

    exit_code, stdout, _ = _run([str(old_root), str(new_root), "--format", "json"])

    assert exit_code == 1
    payload = json.loads(stdout)
    comparison = payload["sources"][0]["comparisons"][0]
    assert comparison["status"] == "removed"
    assert comparison["old_source"] == "UserModel.kt"
    assert comparison["new_source"] is None


def test_cli_015_logs_completion_summary(tmp_path: Path, caplog) -> None:
    old_file = tmp_path / "old.kt"
    _write_file(old_file, OLD_USER)
    caplog.set_level("INFO")

    exit_code, _, _ = _run([str(old_file), str(old_file)])

    assert exit_code == 0
    assert any(
        "Compatibility check completed" in record.message for record in caplog.records
    )


def test_cli_016_directory_mode_pairs_class_moved_between_files(
    tmp_path: Path,
) -> None:
    old_root = tmp_path / "old"
    new_root = tmp_path / "new"
    _write_file(old_root / "A.kt", "data class User(val id: String)")
    _write_file(new_root / "B.kt", "data class User(val id: String)")

    exit_code, stdout, _ = _run([str(old_root), str(new_root)])

    assert exit_code == 0
    assert "Analyzing: User (A.kt -> B.kt)" in stdout
    assert "removed" not in stdout
    assert "[ADDED]" not in stdout


def test_cli_017_directory_mode_moved_class_is_still_compared(
    tmp_path: Path,
) -> None:
    old_root = tmp_path / "old"
    new_root = tmp_path / "new"
    _write_file(old_root / "models" / "A.kt", OLD_USER)
    _write_file(new_root / "models" / "B.kt", NEW_USER_BREAKING)

    exit_code, stdout, _ = _run([str(old_root), str(new_root), "--format", "json"])

    assert exit_code == 1
    comparisons = json.loads(stdout)["sources"][0]["comparisons"]
    assert len(comparisons) == 1
    assert comparisons[0]["status"] == "compared"
    assert comparisons[0]["old_source"] == "models/A.kt"
    assert comparisons[0]["new_source"] == "models/B.kt"
    assert "field_added" in [f["kind"] for f in comparisons[0]["findings"]]


def test_cli_018_help_exits_successfully() -> None:
    exit_code, _, stderr = _run(["--help"])

    assert exit_code == 0
    assert stderr == ""


def test_cli_019_verbose_enables_debug_logging_for_one_run(
    tmp_path: Path, caplog
) -> None:
    old_file = tmp_path / "old.kt"
    _write_file(old_file, OLD_USER)
    caplog.handler.setLevel(logging.DEBUG)
    initial_levels = {
        name: logging.getLogger(name).level for name in ("dcc", "cli")
    }

    exit_code, _, _ = _run([str(old_file), str(old_file), "--verbose"])

    assert exit_code == 0
    assert any(
        record.levelno == logging.DEBUG and "Extraction finished" in record.message
        for record in caplog.records
    )
    assert {
        name: logging.getLogger(name).level for name in ("dcc", "cli")
    } == initial_levels

    caplog.clear()
    exit_code, _, _ = _run([str(old_file), str(old_file)])

    assert exit_code == 0
    assert not any(record.levelno == logging.DEBUG for record in caplog.records)
