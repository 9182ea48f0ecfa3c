# ABOUTME: End-to-end tests for `homelib export` and `homelib import`.
# ABOUTME: Moves a library between two temporary homes and checks the printed summaries.

import zipfile
from pathlib import Path

from click.testing import CliRunner

from homelib.cli import cli
from homelib.db.catalog import LibraryCatalog
from homelib.db.connection import open_library


def _other_home(tmp_path: Path) -> list[str]:
    return [
        "--db", str(tmp_path / "other" / "library.db"),
        "--covers-dir", str(tmp_path / "other" / "covers"),
        "--config", str(tmp_path / "other" / "config.json"),
    ]


def _titles(db_path: Path) -> list[str]:
    conn = open_library(db_path)
    try:
        return [r.title for r in LibraryCatalog(conn).list_all()]
    finally:
        conn.close()


class TestExportCommand:
    def test_export_writes_zip(self, run, tmp_path: Path, make_cover) -> None:
        run("add", "Dune", "-a", "Frank Herbert", "--cover", str(make_cover("d.jpg")))
        run("add", "Emma")
        dest = tmp_path / "backup.zip"

        result = run("export", str(dest))

        assert result.exit_code == 0
        assert "Exported 2 book(s) and 1 cover image(s)" in result.output
        with zipfile.ZipFile(dest) as zf:
            assert "library.json" in zf.namelist()
            assert "assets/1.jpg" in zf.namelist()

    def test_json_destination_renamed(self, run, tmp_path: Path) -> None:
        run("add", "Dune")
        result = run("export", str(tmp_path / "backup.json"))
        assert result.exit_code == 0
        assert (tmp_path / "backup.zip").exists()
        assert not (tmp_path / "backup.json").exists()

    def test_missing_cover_reported(self, run, tmp_path: Path, make_cover) -> None:
        run("add", "Dune", "--cover", str(make_cover("d.jpg")))
        (tmp_path / "home" / "covers" / "1.jpg").unlink()

        result = run("export", str(tmp_path / "backup.zip"))

        assert result.exit_code == 0
        assert "were missing" in result.output
        assert "Dune" in result.output

    def test_unwritable_destination_fails(self, run, tmp_path: Path) -> None:
        run("add", "Dune")
        result = run("export", str(tmp_path / "nowhere" / "backup.zip"))
        assert result.exit_code == 1
        assert "Export failed" in result.output


class TestImportCommand:
    def test_import_into_new_library(self, run, tmp_path: Path, make_cover) -> None:
        run("add", "Dune", "--cover", str(make_cover("d.jpg")))
        run("add", "Emma", "-a", "Jane Austen")
        archive = tmp_path / "backup.zip"
        run("export", str(archive))

        result = CliRunner().invoke(cli, ["import", str(archive), *_other_home(tmp_path)])

        assert result.exit_code == 0
        assert "2 added" in result.output
        assert _titles(tmp_path / "other" / "library.db") == ["Dune", "Emma"]
        assert (tmp_path / "other" / "covers" / "1.jpg").exists()

    def test_reimport_reports_skips(self, run, tmp_path: Path) -> None:
        run("add", "Dune", "--isbn10", "0441013597")
        archive = tmp_path / "backup.zip"
        run("export", str(archive))

        result = run("import", str(archive))

        assert result.exit_code == 0
        assert "0 added" in result.output
        assert "1 skipped" in result.output
        assert "ISBN-10: 0441013597" in result.output

    def test_rejected_records_listed(self, run, tmp_path: Path) -> None:
        archive = tmp_path / "partial.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("library.json", '{"books": [{"title": "Kept"}, {"tags": "x"}]}')

        result = run("import", str(archive))

        assert result.exit_code == 0
        assert "1 added" in result.output
        assert "1 error(s)" in result.output
        assert "record #2" in result.output

    def test_malformed_archive_fails(self, run, tmp_path: Path) -> None:
        archive = tmp_path / "broken.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("notes.txt", "nothing here")

        result = run("import", str(archive))

        assert result.exit_code == 1
        assert "Import failed" in result.output

    def test_missing_source_is_usage_error(self, run, tmp_path: Path) -> None:
        result = run("import", str(tmp_path / "nope.zip"))
        assert result.exit_code == 2


class TestBracketedTitles:
    """Titles that look like console markup are printed literally."""

    def test_import_reimport_and_list(self, run, tmp_path: Path) -> None:
        archive = tmp_path / "brackets.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr(
                "library.json",
                '{"books": [{"title": "Notes [/draft]"}, {"title": "Ideas [draft] v2",'
                ' "authors": ["[bold]Nobody"]}]}',
            )

        first = run("import", str(archive))
        assert first.exit_code == 0
        assert "2 added" in first.output

        second = run("import", str(archive))
        assert second.exit_code == 0
        assert "2 skipped" in second.output
        assert "Notes [/draft]:" in second.output
        assert "Ideas [draft] v2:" in second.output

        listing = run("ls")
        assert listing.exit_code == 0
        assert "[/draft]" in listing.output
        assert "[draft]" in listing.output
        assert "[bold]Nobody" in listing.output

    def test_skip_reason_follows_bracketed_title(self, run, tmp_path: Path) -> None:
        archive = tmp_path / "rated.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("library.json", '{"books": [{"title": "[/x]", "rating": 2}]}')
        run("import", str(archive))

        result = run("import", str(archive))

        assert result.exit_code == 0
        assert "[/x]: Title and authors match" in result.output
