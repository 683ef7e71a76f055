"""
CLI tests for `labnotes entries ...` and `labnotes reconcile ...`.

Source construction is monkeypatched so no command ever reaches a real
database; the fakes from tests/fakes.py stand in for both sources.
"""

import json
from pathlib import Path

from labnotes.cli import entries_cli
from labnotes.cli.main import cli
from labnotes.sources import NotebookStoreClient
from tests.fakes import FailingSupabaseClient, FakeSupabaseClient, StaticSource

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _patch_sources(monkeypatch, legacy=None, store=None):
    monkeypatch.setattr(entries_cli, "build_legacy_source", lambda settings: legacy)
    monkeypatch.setattr(entries_cli, "build_store", lambda settings, dry_run=False: store)


# ---------------------------------------------------------------------------
# entries show
# ---------------------------------------------------------------------------


def test_show_renders_both_sources(cli_runner, monkeypatch, make_legacy, make_modern) -> None:
    _patch_sources(
        monkeypatch,
        legacy=StaticSource([make_legacy(author_id="210", notes="Old note")]),
        store=StaticSource([make_modern(author_name="Jane Doe", attachment_path="x.pdf")]),
    )

    result = cli_runner.invoke(cli, ["entries", "show", "--labno", "2024010001"])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "[legacy] 01/05/2023 09:00 AM  MRGOMEZ  (specimen 2024010001)"
    assert "    Old note" in lines
    assert "──── Dashboard entries ────" in lines
    assert "      - x.pdf [pdf] http://localhost:5000/uploads/x.pdf" in lines
    assert lines.index("──── Dashboard entries ────") < lines.index(
        "[modern] 03/01/2024 10:00 AM  Jane Doe  (specimen 2024010001)"
    )


def test_show_json_output(cli_runner, monkeypatch, make_modern) -> None:
    _patch_sources(
        monkeypatch,
        legacy=StaticSource([]),
        store=StaticSource(
            [
                make_modern(attachment_path="a.pdf"),
                make_modern(attachment_path="b.pdf"),
            ]
        ),
    )

    result = cli_runner.invoke(cli, ["entries", "show", "--labno", "2024010001", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert len(payload) == 1
    assert payload[0]["entry"]["attachments"] == ["a.pdf", "b.pdf"]
    assert payload[0]["separator_before"] is False


def test_show_warns_when_one_source_fails(cli_runner, monkeypatch, make_modern) -> None:
    _patch_sources(
        monkeypatch,
        legacy=StaticSource(error=RuntimeError("ORA-12541")),
        store=StaticSource([make_modern()]),
    )

    result = cli_runner.invoke(cli, ["entries", "show", "--labno", "2024010001"])

    assert result.exit_code == 0
    assert "Warning: legacy notebook unavailable: ORA-12541" in result.output
    assert "[modern]" in result.output


def test_show_fails_when_both_sources_fail(cli_runner, monkeypatch) -> None:
    _patch_sources(
        monkeypatch,
        legacy=StaticSource(error=RuntimeError("legacy down")),
        store=None,
    )

    result = cli_runner.invoke(cli, ["entries", "show", "--labno", "2024010001"])

    assert result.exit_code == 1
    assert "Error: Unable to load notebook entries" in result.output


def test_show_with_no_entries(cli_runner, monkeypatch) -> None:
    _patch_sources(monkeypatch, legacy=StaticSource([]), store=StaticSource([]))

    result = cli_runner.invoke(cli, ["entries", "show", "--labno", "2024010001"])

    assert result.exit_code == 0
    assert result.output.strip() == "No notebook entries found."


def test_show_verbose_prints_summary(cli_runner, monkeypatch, make_legacy) -> None:
    _patch_sources(monkeypatch, legacy=StaticSource([make_legacy()]), store=StaticSource([]))

    result = cli_runner.invoke(cli, ["entries", "show", "--labno", "2024010001", "--verbose"])

    assert result.exit_code == 0
    assert "Fetching legacy and dashboard notebook rows..." in result.output
    assert "'legacy_records': 1" in result.output


# ---------------------------------------------------------------------------
# entries recent
# ---------------------------------------------------------------------------


def test_recent_lists_latest_rows(cli_runner, monkeypatch) -> None:
    fake = FakeSupabaseClient(
        [
            {
                "labno": "2024010001",
                "notes": "Checked",
                "createDate": "2024-03-01 18:00:05",
                "techCreate": "jdoe",
                "attachment_path": "1-a.pdf",
            }
        ]
    )
    _patch_sources(monkeypatch, store=NotebookStoreClient(client=fake))

    result = cli_runner.invoke(cli, ["entries", "recent", "--limit", "5"])

    assert result.exit_code == 0, result.output
    assert "03/01/2024 06:00 PM  2024010001  jdoe  Checked  [1-a.pdf]" in result.output
    assert fake.queries[-1].limit_to == 5


def test_recent_without_credentials_fails(cli_runner, monkeypatch) -> None:
    _patch_sources(monkeypatch, store=None)

    result = cli_runner.invoke(cli, ["entries", "recent"])

    assert result.exit_code == 1
    assert "Supabase credentials not found" in result.output


# ---------------------------------------------------------------------------
# entries add
# ---------------------------------------------------------------------------


def test_add_with_attachments(cli_runner, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LABNOTES_UPLOADS_DIR", str(tmp_path / "uploads"))
    fake = FakeSupabaseClient()
    _patch_sources(monkeypatch, store=NotebookStoreClient(client=fake, uploads_dir=tmp_path / "uploads"))

    report = tmp_path / "report.pdf"
    report.write_bytes(b"pdf")

    result = cli_runner.invoke(
        cli,
        [
            "entries", "add",
            "--labno", "2024010001",
            "--fname", "JUAN",
            "--lname", "DELA CRUZ",
            "--notes", "Results released",
            "--username", "jdoe",
            "--attachment", str(report),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Notebook entry saved successfully with 1 attachment(s)" in result.output
    rows = fake.store["pdo_notebook"]
    assert len(rows) == 1
    assert rows[0]["attachment_path"].endswith("-report.pdf")
    assert (tmp_path / "uploads" / rows[0]["attachment_path"]).exists()


def test_add_rejects_blank_notes_before_copying(cli_runner, monkeypatch, tmp_path) -> None:
    uploads = tmp_path / "uploads"
    monkeypatch.setenv("LABNOTES_UPLOADS_DIR", str(uploads))
    _patch_sources(monkeypatch, store=NotebookStoreClient(client=FakeSupabaseClient()))

    report = tmp_path / "report.pdf"
    report.write_bytes(b"pdf")

    result = cli_runner.invoke(
        cli,
        [
            "entries", "add",
            "--labno", "2024010001",
            "--fname", "JUAN",
            "--lname", "DELA CRUZ",
            "--notes", "   ",
            "--attachment", str(report),
        ],
    )

    assert result.exit_code == 1
    assert "Error: Notes field is required" in result.output
    assert not uploads.exists()


def test_add_insert_failure_removes_staged_file(cli_runner, monkeypatch, tmp_path) -> None:
    uploads = tmp_path / "uploads"
    monkeypatch.setenv("LABNOTES_UPLOADS_DIR", str(uploads))
    _patch_sources(
        monkeypatch,
        store=NotebookStoreClient(client=FailingSupabaseClient(), uploads_dir=uploads),
    )

    report = tmp_path / "report.pdf"
    report.write_bytes(b"pdf")

    result = cli_runner.invoke(
        cli,
        [
            "entries", "add",
            "--labno", "2024010001",
            "--fname", "JUAN",
            "--lname", "DELA CRUZ",
            "--notes", "Results released",
            "--attachment", str(report),
        ],
    )

    assert result.exit_code == 1
    assert "Error: Supabase error" in result.output
    assert list(uploads.iterdir()) == []


def test_add_dry_run_with_real_builder(cli_runner, monkeypatch, tmp_path) -> None:
    uploads = tmp_path / "uploads"
    monkeypatch.setenv("LABNOTES_UPLOADS_DIR", str(uploads))

    result = cli_runner.invoke(
        cli,
        [
            "entries", "add",
            "--labno", "2024010001",
            "--fname", "JUAN",
            "--lname", "DELA CRUZ",
            "--notes", "Results released",
            "--dry-run",
            "--debug",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "[dry-run] Notebook entry saved successfully" in result.output
    assert "User: SYSTEM" in result.output
    assert '"attachment_path": ""' in result.output
    assert not uploads.exists()


# ---------------------------------------------------------------------------
# reconcile run
# ---------------------------------------------------------------------------


def test_reconcile_run_from_fixture_files(cli_runner) -> None:
    result = cli_runner.invoke(
        cli,
        [
            "reconcile", "run",
            "--legacy-path", str(FIXTURES_DIR / "legacy_entries.json"),
            "--modern-path", str(FIXTURES_DIR / "modern_entries.json"),
            "--json",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert [p["entry"]["origin"] for p in payload] == ["legacy", "legacy", "modern", "modern"]
    assert [p["separator_before"] for p in payload] == [False, False, True, False]


def test_reconcile_run_requires_a_path(cli_runner) -> None:
    result = cli_runner.invoke(cli, ["reconcile", "run"])

    assert result.exit_code == 1
    assert "provide --legacy-path, --modern-path, or both" in result.output


def test_reconcile_run_rejects_bad_json(cli_runner, tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")

    result = cli_runner.invoke(cli, ["reconcile", "run", "--modern-path", str(bad)])

    assert result.exit_code == 1
    assert "is not valid JSON" in result.output


def test_reconcile_run_missing_file(cli_runner, tmp_path) -> None:
    result = cli_runner.invoke(cli, ["reconcile", "run", "--legacy-path", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_reconcile_run_rejects_rows_that_are_not_objects(cli_runner, tmp_path) -> None:
    export = tmp_path / "modern.json"
    export.write_text(json.dumps(["not a row"]), encoding="utf-8")

    result = cli_runner.invoke(cli, ["reconcile", "run", "--modern-path", str(export)])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "row 0 is not a JSON object" in result.output
