from __future__ import annotations

import json
from pathlib import Path

import pytest

from sortify import file_mover
from sortify.config import ClassificationTable, build_classification_table
from sortify.errors import DirectoryNotFound
from sortify.file_mover import MoveOutcome
from sortify.logger import SortLogger
from sortify.organizer import PassState, SortPass, sort_directory

from conftest import write_file

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24


def test_basic_scenario(tmp_path: Path, small_table: ClassificationTable, make_config) -> None:
    write_file(tmp_path / "a.jpg")
    write_file(tmp_path / "b.txt")
    write_file(tmp_path / "c")
    config = make_config(table=small_table, fallback_category="other")

    report = SortPass(config).run(tmp_path)

    assert (tmp_path / "images" / "a.jpg").exists()
    assert (tmp_path / "documents" / "b.txt").exists()
    assert (tmp_path / "other" / "c").exists()
    assert [r.outcome for r in report.results] == [MoveOutcome.MOVED] * 3
    assert report.moved == 3
    assert report.failed == 0


def test_collision_scenario(tmp_path: Path, small_table: ClassificationTable, make_config) -> None:
    write_file(tmp_path / "images" / "a.jpg", b"already sorted")
    write_file(tmp_path / "a.jpg", b"incoming")
    config = make_config(table=small_table, fallback_category="other")

    report = SortPass(config).run(tmp_path)

    assert (tmp_path / "images" / "a.jpg").read_bytes() == b"already sorted"
    assert (tmp_path / "images" / "a_1.jpg").read_bytes() == b"incoming"
    assert report.results[0].destination == tmp_path / "images" / "a_1.jpg"


def test_unclassified_goes_to_fallback_not_failed(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "mystery.qqq")
    write_file(tmp_path / ".hidden")

    report = SortPass(make_config()).run(tmp_path)

    assert report.failed == 0
    assert (tmp_path / "Uncategorized" / "mystery.qqq").exists()
    assert (tmp_path / "Uncategorized" / ".hidden").exists()


def test_every_entry_yields_one_result(
    tmp_path: Path, make_config, monkeypatch: pytest.MonkeyPatch
) -> None:
    for name in ("a.jpg", "b.pdf", "c.zip", "d", "Thumbs.db", "e.mp3"):
        write_file(tmp_path / name)
    write_file(tmp_path / "sub" / "nested.txt")

    real_move = file_mover.shutil.move

    def _flaky(src, dst):
        if src.endswith("c.zip"):
            raise OSError("disk error")
        return real_move(src, dst)

    monkeypatch.setattr(file_mover.shutil, "move", _flaky)

    report = SortPass(make_config()).run(tmp_path)

    assert report.total == 6
    assert report.moved + report.skipped + report.failed == report.total
    assert report.failed == 1
    assert report.skipped == 1
    assert (tmp_path / "Audio" / "e.mp3").exists()
    assert (tmp_path / "sub" / "nested.txt").exists()


def test_failure_does_not_abort_pass(tmp_path: Path, make_config, monkeypatch) -> None:
    write_file(tmp_path / "a.jpg")
    write_file(tmp_path / "b.jpg")

    def _deny(src, dst):
        raise PermissionError(13, "Permission denied", dst)

    monkeypatch.setattr(file_mover.shutil, "move", _deny)

    report = SortPass(make_config()).run(tmp_path)

    assert report.failed == 2
    assert all(r.reason.startswith("PermissionDenied") for r in report.failures())


def test_missing_directory_is_fatal(tmp_path: Path, make_config) -> None:
    sort_pass = SortPass(make_config())

    with pytest.raises(DirectoryNotFound):
        sort_pass.run(tmp_path / "missing")
    assert sort_pass.state is PassState.IDLE


def test_state_transitions(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "a.jpg")
    sort_pass = SortPass(make_config())
    assert sort_pass.state is PassState.IDLE

    sort_pass.run(tmp_path)

    assert sort_pass.state is PassState.DONE


def test_run_uses_configured_target(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "a.jpg")

    report = SortPass(make_config(target_directory=tmp_path)).run()

    assert report.directory == tmp_path
    assert (tmp_path / "Pictures" / "a.jpg").exists()


def test_dry_run_moves_nothing(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "a.jpg")
    write_file(tmp_path / "b.txt")

    report = SortPass(make_config(dry_run=True)).run(tmp_path)

    assert report.dry_run
    assert report.moved == 2
    assert (tmp_path / "a.jpg").exists()
    assert not (tmp_path / "Pictures").exists()


def test_excluded_and_protected_files_are_skipped(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / ".DS_Store")
    config_file = write_file(tmp_path / "sortify.yaml", b"dry_run: false\n")
    write_file(tmp_path / "keep.yaml")

    config = make_config(protected_paths={config_file})
    report = SortPass(config).run(tmp_path)

    skipped = {r.source.name for r in report.results if r.outcome is MoveOutcome.SKIPPED}
    assert skipped == {".DS_Store", "sortify.yaml"}
    assert (tmp_path / "sortify.yaml").exists()
    assert (tmp_path / "Code" / "keep.yaml").exists()


def test_custom_table_overrides(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "book.epub")
    table = build_classification_table({"Ebooks": ["epub"]})

    SortPass(make_config(table=table)).run(tmp_path)

    assert (tmp_path / "Ebooks" / "book.epub").exists()


def test_mismatch_goes_to_manual_folder(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "photo.txt", PNG)

    report = SortPass(make_config(detect_signatures=True)).run(tmp_path)

    assert (tmp_path / "Check manually" / "photo.txt").exists()
    assert len(report.warnings) == 1
    assert "photo.txt" in report.warnings[0]


@pytest.mark.parametrize(
    "policy, folder",
    [("signature", "Pictures"), ("extension", "Documents")],
)
def test_mismatch_policies(tmp_path: Path, make_config, policy: str, folder: str) -> None:
    write_file(tmp_path / "photo.txt", PNG)

    SortPass(make_config(detect_signatures=True, mismatch_policy=policy)).run(tmp_path)

    assert (tmp_path / folder / "photo.txt").exists()


def test_mismatch_skip_policy(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "photo.txt", PNG)

    report = SortPass(make_config(detect_signatures=True, mismatch_policy="skip")).run(tmp_path)

    assert report.skipped == 1
    assert (tmp_path / "photo.txt").exists()


def test_signature_fills_missing_extension(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "download", PNG)

    SortPass(make_config(detect_signatures=True)).run(tmp_path)

    assert (tmp_path / "Pictures" / "download").exists()


def test_binary_skip_policy(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "tool.exe", b"MZ\x90\x00\x03\x00")
    write_file(tmp_path / "notes.txt", b"hello\n")

    report = SortPass(make_config(detect_signatures=True, binary_policy="skip")).run(tmp_path)

    assert (tmp_path / "tool.exe").exists()
    assert (tmp_path / "Documents" / "notes.txt").exists()
    assert report.skipped == 1


def test_binary_ask_remembers_all_answer(tmp_path: Path, make_config) -> None:
    for name in ("a.exe", "b.exe", "c.exe"):
        write_file(tmp_path / name, b"MZ\x90\x00\x03\x00")
    asked = []

    def _decider(entry):
        asked.append(entry.name)
        return "process_all"

    config = make_config(detect_signatures=True, binary_policy="ask")
    report = SortPass(config, binary_decider=_decider).run(tmp_path)

    assert asked == ["a.exe"]
    assert report.moved == 3
    assert (tmp_path / "Executables" / "c.exe").exists()


def test_binary_ask_without_prompt_skips(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "a.exe", b"MZ\x90\x00\x03\x00")

    report = SortPass(make_config(detect_signatures=True, binary_policy="ask")).run(tmp_path)

    assert report.skipped == 1
    assert report.warnings


def test_session_logger_records_results(tmp_path: Path, make_config) -> None:
    target = tmp_path / "target"
    write_file(target / "a.jpg")
    sort_logger = SortLogger(log_dir=tmp_path / "logs")

    SortPass(make_config(), sort_logger=sort_logger).run(target)
    sort_logger.finalize()

    log_paths = sort_logger.get_log_paths()
    assert log_paths["text_log"].exists()
    data = json.loads(log_paths["json_log"].read_text(encoding="utf-8"))
    statuses = [e["status"] for e in data["entries"]]
    assert "moved" in statuses


def test_log_files_inside_target_are_protected(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "a.jpg")
    sort_logger = SortLogger(log_dir=tmp_path)

    report = SortPass(make_config(), sort_logger=sort_logger).run(tmp_path)
    sort_logger.finalize()

    assert sort_logger.log_file.exists()
    assert report.moved == 1
    assert report.skipped == 1


def test_sort_directory_helper(tmp_path: Path) -> None:
    write_file(tmp_path / "song.flac")

    report = sort_directory(tmp_path)

    assert report.by_category() == {"Audio": 1}
    assert (tmp_path / "Audio" / "song.flac").exists()


def test_spreadsheet_with_office_header_is_not_sent_to_manual(tmp_path: Path, make_config) -> None:
    header = b"PK\x03\x04\x14\x00\x06\x00" + b"\x00" * 22 + b"[Content_Types].xml"
    write_file(tmp_path / "budget.xlsx", header)

    report = SortPass(make_config(detect_signatures=True)).run(tmp_path)

    assert not report.warnings
    assert (tmp_path / "Documents" / "budget.xlsx").exists()


def test_unusable_collision_name_does_not_abort_pass(tmp_path: Path, make_config) -> None:
    name = "a" * 251 + ".jpg"
    write_file(tmp_path / name)
    write_file(tmp_path / "Pictures" / name)
    write_file(tmp_path / "z.txt")

    report = SortPass(make_config()).run(tmp_path)

    assert report.total == 2
    assert report.failed == 1
    assert report.moved == 1
    assert (tmp_path / "Documents" / "z.txt").exists()


@pytest.mark.parametrize(
    "answer, folder",
    [("signature", "Pictures"), ("extension", "Documents"), ("manual", "Check manually")],
)
def test_mismatch_ask_follows_answer(tmp_path: Path, make_config, answer: str, folder: str) -> None:
    write_file(tmp_path / "photo.txt", PNG)
    asked = []

    def _decider(entry, signature):
        asked.append((entry.name, signature))
        return answer

    config = make_config(detect_signatures=True, mismatch_policy="ask")
    SortPass(config, mismatch_decider=_decider).run(tmp_path)

    assert asked == [("photo.txt", "png")]
    assert (tmp_path / folder / "photo.txt").exists()


def test_mismatch_ask_skip_answer(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "photo.txt", PNG)

    config = make_config(detect_signatures=True, mismatch_policy="ask")
    report = SortPass(config, mismatch_decider=lambda entry, sig: "skip").run(tmp_path)

    assert report.skipped == 1
    assert (tmp_path / "photo.txt").exists()


def test_mismatch_ask_without_prompt_uses_manual_folder(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "photo.txt", PNG)

    SortPass(make_config(detect_signatures=True, mismatch_policy="ask")).run(tmp_path)

    assert (tmp_path / "Check manually" / "photo.txt").exists()


def test_mismatch_ask_is_not_prompted_in_dry_run(tmp_path: Path, make_config) -> None:
    write_file(tmp_path / "photo.txt", PNG)

    def _decider(entry, signature):
        raise AssertionError("dry run must not prompt")

    config = make_config(detect_signatures=True, mismatch_policy="ask", dry_run=True)
    report = SortPass(config, mismatch_decider=_decider).run(tmp_path)

    assert report.results[0].category == "Check manually"
    assert (tmp_path / "photo.txt").exists()
