"""Test tag string helpers"""

from music_tags.tagging.tags import (
    get_tag_name,
    make_tag,
    parse_delimiters,
    parse_field_names,
    parse_tag_names,
    strip_surrounding_quotes,
)


class TestTagName:
    """Test Name parsing"""

    def test_name_before_last_colon(self):
        """Test the Name ends at the last colon"""
        assert get_tag_name("BPM:128") == "BPM"
        assert get_tag_name("AB:KEY:C#m") == "AB:KEY"

    def test_empty_value(self):
        """Test a trailing colon gives the full prefix"""
        assert get_tag_name("MOOD:") == "MOOD"

    def test_no_colon(self):
        """Test tags without a colon have no Name"""
        assert get_tag_name("plain") is None
        assert get_tag_name("") is None

    def test_make_tag(self):
        """Test tag construction"""
        assert make_tag("KEY", "Am") == "KEY:Am"


class TestQuoteStripping:
    """Test surrounding quote removal"""

    def test_matching_pairs(self):
        """Test one pair of matching quotes is removed"""
        assert strip_surrounding_quotes('"Happy"') == "Happy"
        assert strip_surrounding_quotes("'Happy'") == "Happy"
        assert strip_surrounding_quotes('""Happy""') == '"Happy"'

    def test_untouched(self):
        """Test mismatched or partial quotes stay"""
        assert strip_surrounding_quotes("\"Happy'") == "\"Happy'"
        assert strip_surrounding_quotes('"') == '"'
        assert strip_surrounding_quotes('Ha"ppy') == 'Ha"ppy'
        assert strip_surrounding_quotes("") == ""


class TestParseFieldNames:
    """Test configured field name parsing"""

    def test_basic(self):
        """Test comma-separated names keep order"""
        assert parse_field_names("BPM, KEY,MOOD") == ["BPM", "KEY", "MOOD"]

    def test_quotes_and_blanks(self):
        """Test outer quotes, per-entry quotes and empty entries"""
        assert parse_field_names('"BPM, \'KEY\', ,MOOD"') == ["BPM", "KEY", "MOOD"]
        assert parse_field_names('"Energy",') == ["Energy"]

    def test_empty(self):
        """Test empty settings yield nothing"""
        assert parse_field_names("") == []
        assert parse_field_names(None) == []
        assert parse_field_names(" , ,") == []


class TestParseDelimiters:
    """Test delimiter parsing"""

    def test_distinct_in_order(self):
        """Test duplicate characters are collapsed"""
        assert parse_delimiters("/;/") == "/;"

    def test_whitespace_only_disables(self):
        """Test whitespace alone disables splitting"""
        assert parse_delimiters("   ") == ""
        assert parse_delimiters("") == ""
        assert parse_delimiters(None) == ""

    def test_mixed_whitespace_kept(self):
        """Test whitespace counts when mixed with other characters"""
        assert parse_delimiters("; ") == "; "


class TestParseTagNames:
    """Test removal name parsing"""

    def test_lowercased_and_trimmed(self):
        """Test entries are trimmed, lower-cased and de-duplicated"""
        assert parse_tag_names(" Mood, BPM ,, mood") == {"mood", "bpm"}

    def test_empty(self):
        """Test empty input"""
        assert parse_tag_names("") == set()
        assert parse_tag_names(" , ") == set()
