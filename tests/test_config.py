"""Test configuration loading"""

import pytest

from music_tags.core.config import load_config
from music_tags.core.exceptions import ConfigError


def _write(temp_dir, text):
    path = temp_dir / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Test load_config()"""

    def test_full(self, temp_dir):
        path = _write(temp_dir, f"""
library:
  database: "{temp_dir}/lib.db"
  log_directory: "{temp_dir}/logs-here"
extraction:
  tag_names: '"BPM, KEY, ,MOOD"'
  tag_delimiters: "/;/"
  overwrite_existing_tags: true
  propagate_tags_to_parents: true
processing:
  threads: 6
""")
        config = load_config(path)
        assert config.library.database == (temp_dir / "lib.db").resolve()
        assert config.library.log_directory == (temp_dir / "logs-here").resolve()
        assert config.extraction.field_names == ["BPM", "KEY", "MOOD"]
        assert config.extraction.delimiters == "/;"
        assert config.extraction.overwrite_existing_tags is True
        assert config.extraction.propagate_tags_to_parents is True
        assert config.processing.threads == 6

    def test_defaults(self, temp_dir):
        path = _write(temp_dir, f"library:\n  database: {temp_dir}/lib.db\n")
        config = load_config(path)
        assert config.library.log_directory == temp_dir.resolve()
        assert config.extraction.field_names == []
        assert config.extraction.delimiters == ""
        assert config.extraction.overwrite_existing_tags is False
        assert config.extraction.propagate_tags_to_parents is False
        assert config.processing.threads is None

    def test_frozen(self, temp_dir):
        config = load_config(_write(temp_dir, f"library:\n  database: {temp_dir}/lib.db\n"))
        with pytest.raises(AttributeError):
            config.extraction.tag_names = "BPM"

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_config(temp_dir / "nope.yaml")

    def test_invalid_yaml(self, temp_dir):
        with pytest.raises(ConfigError, match="YAML"):
            load_config(_write(temp_dir, "library: [unclosed"))

    def test_not_a_dictionary(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, "- a\n- b\n"))

    def test_missing_library(self, temp_dir):
        with pytest.raises(ConfigError, match="library"):
            load_config(_write(temp_dir, "extraction:\n  tag_names: BPM\n"))

    def test_empty_database(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, "library:\n  database: ''\n"))

    def test_wrong_types(self, temp_dir):
        base = f"library:\n  database: {temp_dir}/lib.db\n"
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, base + "extraction:\n  overwrite_existing_tags: 'yes'\n"))
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, base + "extraction:\n  tag_names: [BPM]\n"))
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, base + "processing:\n  threads: 0\n"))
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, base + "processing:\n  threads: true\n"))
        with pytest.raises(ConfigError):
            load_config(_write(temp_dir, base + "extraction: BPM\n"))
