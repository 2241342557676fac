"""
Tests for bfav/cli.py

Runs the command-line entry point against a temporary vault.
"""
import json
import os
from unittest.mock import patch

import pytest

from bfav import cli
from bfav import config as config_module
from bfav.models import TABLE_HEADER

ROW = "| Site A | [🔗](https://a.com) | #a | 2021-01-01 |  |  |  |"


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """A temporary vault with isolated configuration."""
    home = tmp_path / "home"
    vault = tmp_path / "vault"
    home.mkdir()
    vault.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("BFAV_"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(config_module, "_config", None)
    return vault


def run(vault, *args):
    cli.main(["--vault", str(vault), *args])


def write_document(vault, name, *rows):
    folder = vault / "Browser Favorites"
    folder.mkdir(exist_ok=True)
    text = f"# {name} Bookmarks\n\n## General\n\n" + TABLE_HEADER + "".join(r + "\n" for r in rows)
    (folder / f"{name}.md").write_text(text, encoding="utf-8")
    return folder / f"{name}.md"


class TestParser:
    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_check_options(self):
        args = cli.build_parser().parse_args(["check", "--file", "News", "--file", "Blogs", "-y", "--delay", "0.5"])
        assert args.file == ["News", "Blogs"]
        assert args.yes is True
        assert args.delay == 0.5

    def test_global_options(self):
        args = cli.build_parser().parse_args(["--vault", "/v", "-o", "json", "dedup"])
        assert args.vault == "/v"
        assert args.output == "json"
        assert args.command == "dedup"


class TestImportCommand:
    """Test `bfav import`."""

    def test_import_writes_documents(self, workspace, sample_export, capsys):
        export = workspace.parent / "bookmarks.html"
        export.write_text(sample_export, encoding="utf-8")

        run(workspace, "import", str(export))

        folder = workspace / "Browser Favorites"
        assert sorted(p.name for p in folder.iterdir()) == ["General.md", "News.md", "Reference.md"]
        assert "Import completed" in capsys.readouterr().out

    def test_import_json_output(self, workspace, sample_export, capsys):
        export = workspace.parent / "bookmarks.html"
        export.write_text(sample_export, encoding="utf-8")

        run(workspace, "-o", "json", "import", str(export))

        data = json.loads(capsys.readouterr().out)
        assert data["processed"] == 3
        assert data["added"] == 3

    def test_output_folder_option(self, workspace, sample_export):
        export = workspace.parent / "bookmarks.html"
        export.write_text(sample_export, encoding="utf-8")

        run(workspace, "--output-folder", "Links", "import", str(export))

        assert (workspace / "Links" / "News.md").exists()

    def test_missing_file_exits_with_error(self, workspace, capsys):
        with pytest.raises(SystemExit) as exc:
            run(workspace, "import", str(workspace / "missing.html"))
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().out

    def test_export_without_links_exits_with_error(self, workspace, capsys):
        export = workspace.parent / "empty.html"
        export.write_text("<html><body>nothing</body></html>", encoding="utf-8")

        with pytest.raises(SystemExit) as exc:
            run(workspace, "import", str(export))

        assert exc.value.code == 1
        assert "No bookmarks found in the input file" in capsys.readouterr().out


class TestCheckCommand:
    """Test `bfav check`."""

    def test_disabled_by_setting(self, workspace, monkeypatch, capsys):
        monkeypatch.setenv("BFAV_CHECK_ACCESSIBILITY", "false")
        path = write_document(workspace, "News", ROW)

        with patch("bfav.cli.MetaFetcher") as fetcher_cls:
            run(workspace, "check", "--yes")

        fetcher_cls.assert_not_called()
        assert "disabled" in capsys.readouterr().out
        assert ROW in path.read_text(encoding="utf-8")

    def test_nothing_to_check(self, workspace, capsys):
        run(workspace, "check", "--yes")
        assert "No bookmarks found to check!" in capsys.readouterr().out

    def test_check_updates_rows(self, workspace, capsys):
        path = write_document(workspace, "News", ROW)

        with patch("bfav.cli.MetaFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch.return_value = {
                "success": True, "status_code": 200, "description": "Site A home",
                "tags": ["#kw"], "title": "", "error": None,
            }
            run(workspace, "-o", "json", "check", "--yes", "--delay", "0")

        data = json.loads(capsys.readouterr().out)
        assert data["accessible"] == 1
        assert data["cancelled"] is False
        text = path.read_text(encoding="utf-8")
        assert "| Site A | [🔗](https://a.com) | #a #kw | 2021-01-01 | Site A home |" in text
        assert "| ✅ |" in text

    def test_check_selected_file_only(self, workspace):
        news = write_document(workspace, "News", ROW)
        blogs = write_document(workspace, "Blogs", ROW)
        before = blogs.read_text(encoding="utf-8")

        with patch("bfav.cli.MetaFetcher") as fetcher_cls:
            fetcher_cls.return_value.fetch.return_value = {
                "success": False, "status_code": 404, "description": "",
                "tags": [], "title": "", "error": "HTTP 404",
            }
            run(workspace, "check", "--file", "News", "--delay", "0")

        assert "| ❌ |" in news.read_text(encoding="utf-8")
        assert blogs.read_text(encoding="utf-8") == before


class TestDedupCommand:
    def test_dedup_removes_duplicates(self, workspace, capsys):
        newer = "| Site A new | [🔗](https://a.com) | #b | 2022-01-01 |  |  |  |"
        path = write_document(workspace, "News", ROW, newer)

        run(workspace, "dedup", "--yes")

        text = path.read_text(encoding="utf-8")
        assert text.count("https://a.com") == 1
        assert "| Site A new | [🔗](https://a.com) | #a #b | 2022-01-01 |" in text
        assert "removed 1 duplicates" in capsys.readouterr().out


class TestConfigCommand:
    def test_show_json(self, workspace, capsys):
        run(workspace, "-o", "json", "config", "show")
        data = json.loads(capsys.readouterr().out)
        assert data["output_folder_path"] == "Browser Favorites"
        assert data["vault_path"] == str(workspace)

    def test_init_writes_file(self, workspace):
        target = workspace.parent / "bfav-config.toml"
        run(workspace, "config", "init", str(target))
        assert "output_folder_path" in target.read_text(encoding="utf-8")

    def test_config_file_option(self, workspace, capsys):
        config_file = workspace.parent / "custom.toml"
        config_file.write_text('output_folder_path = "Saved Links"\n', encoding="utf-8")

        cli.main(["--config", str(config_file), "-o", "json", "config", "show"])

        assert json.loads(capsys.readouterr().out)["output_folder_path"] == "Saved Links"
