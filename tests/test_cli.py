"""Test the command-line interface"""

import pytest
from click.testing import CliRunner

from conftest import write_flac

from music_tags.cli import cli
from music_tags.library.database import LibraryDatabase
from music_tags.library.models import ItemKind, ItemQuery


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def setup(temp_dir):
    """A music folder with two FLAC files and a config pointing at temp_dir."""
    music = temp_dir / "music"
    write_flac(music / "01.flac", TITLE="One", ALBUM="Record", ARTIST="Alpha", BPM="128", ENERGY="7")
    write_flac(music / "02.flac", TITLE="Two", ALBUM="Record", ARTIST="Alpha", BPM="90")

    config_path = temp_dir / "config.yaml"

    def write_config(**extraction):
        lines = [
            "library:",
            f'  database: "{temp_dir}/library.db"',
            "extraction:",
        ]
        for key, value in extraction.items():
            if isinstance(value, bool):
                value = "true" if value else "false"
            else:
                value = f'"{value}"'
            lines.append(f"  {key}: {value}")
        config_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return config_path

    return music, write_config


def _tracks(temp_dir):
    with LibraryDatabase(temp_dir / "library.db") as db:
        return {t.name: t.tags for t in db.query_items(ItemQuery(kind=ItemKind.TRACK))}


def _albums(temp_dir):
    with LibraryDatabase(temp_dir / "library.db") as db:
        return {a.name: a.tags for a in db.query_items(ItemQuery(kind=ItemKind.ALBUM))}


class TestCli:
    """Test the CLI commands"""

    def test_scan_process_remove(self, runner, temp_dir, setup):
        music, write_config = setup
        config = write_config(tag_names="BPM, ENERGY", propagate_tags_to_parents=True)

        result = runner.invoke(cli, ["--config", str(config), "scan", str(music)])
        assert result.exit_code == 0, result.output
        assert "Imported 2/2 files" in result.output

        result = runner.invoke(cli, ["--config", str(config), "process"])
        assert result.exit_code == 0, result.output
        assert _tracks(temp_dir) == {"One": ["BPM:128", "ENERGY:7"], "Two": ["BPM:90"]}
        assert _albums(temp_dir) == {"Record": ["BPM:128", "BPM:90", "ENERGY:7"]}

        result = runner.invoke(cli, ["--config", str(config), "remove", "energy", "--from-parents"])
        assert result.exit_code == 0, result.output
        assert _tracks(temp_dir) == {"One": ["BPM:128"], "Two": ["BPM:90"]}
        assert _albums(temp_dir) == {"Record": ["BPM:128", "BPM:90"]}

    def test_status(self, runner, temp_dir, setup):
        music, write_config = setup
        config = write_config(tag_names="BPM")
        runner.invoke(cli, ["--config", str(config), "scan", str(music)])

        result = runner.invoke(cli, ["--config", str(config), "status"])
        assert result.exit_code == 0, result.output
        assert "Fields:            BPM" in result.output
        assert "Tracks:            2" in result.output

    def test_inspect(self, runner, setup):
        music, write_config = setup
        config = write_config(tag_names="BPM, KEY", tag_delimiters=";")

        result = runner.invoke(cli, ["--config", str(config), "inspect", str(music / "01.flac")])
        assert result.exit_code == 0, result.output
        assert "[vorbis]" in result.output
        assert "BPM:128" in result.output

    def test_missing_config(self, runner, temp_dir):
        result = runner.invoke(cli, ["--config", str(temp_dir / "nope.yaml"), "status"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_library_error(self, runner, temp_dir):
        config = temp_dir / "config.yaml"
        config.write_text(
            f'library:\n  database: "{temp_dir}/missing/library.db"\n  log_directory: "{temp_dir}"\n',
            encoding="utf-8",
        )
        result = runner.invoke(cli, ["--config", str(config), "status"])
        assert result.exit_code == 2
        assert "Library error" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
