"""Test field name resolution and the extraction strategies"""

from mutagen.asf import ASFUnicodeAttribute
from mutagen.id3 import TBPM, TDRC, TFLT, TIT1, TKEY, TMOO, TXXX
from mutagen.mp4 import MP4FreeForm

from music_tags.extraction.probes import join_values, probe_custom_chain, probe_key
from music_tags.extraction.resolver import (
    CustomChainStrategy,
    SpecialFrameStrategy,
    KeyStrategy,
    StandardFieldStrategy,
    StrategyKind,
    clean_field_name,
    resolve,
)


class TestResolve:
    """Test resolve()"""

    def test_clean_field_name(self):
        assert clean_field_name(" 'bpm\" ") == "BPM"

    def test_standard_fields(self):
        for name in ["ARTIST", "album", "Genre", "YEAR", "COMPOSER", "BPM",
                     "PUBLISHER", "COPYRIGHT", "COMMENT"]:
            strategy = resolve(name)
            assert isinstance(strategy, StandardFieldStrategy)
            assert strategy.kind is StrategyKind.STANDARD

    def test_special_fields(self):
        assert isinstance(resolve("key"), KeyStrategy)
        mood = resolve("Mood")
        assert isinstance(mood, SpecialFrameStrategy)
        assert mood.frame_id == "TMOO"
        assert resolve("CONTENTGROUP").frame_id == "TIT1"
        assert resolve("LANGUAGE").frame_id == "TLAN"

    def test_everything_else_is_custom(self):
        strategy = resolve("energy")
        assert isinstance(strategy, CustomChainStrategy)
        assert strategy.field_name == "ENERGY"
        assert strategy.kind is StrategyKind.CUSTOM


class TestStandardFieldStrategy:
    """Test standard field extraction"""

    def test_bpm(self, make_handle, id3_tags):
        id3_tags.add(TBPM(encoding=3, text=["128"]))
        assert resolve("BPM").extract(make_handle(id3_tags)) == "128"

    def test_numeric_zero_is_absent(self, make_handle, vorbis_tags):
        vorbis_tags["BPM"] = "0"
        assert resolve("BPM").extract(make_handle(vorbis_tags)) is None
        assert resolve("YEAR").extract(make_handle(vorbis_tags)) is None

    def test_year(self, make_handle, id3_tags):
        id3_tags.add(TDRC(encoding=3, text=["2004-06"]))
        assert resolve("YEAR").extract(make_handle(id3_tags)) == "2004"

    def test_text_field(self, make_handle, vorbis_tags):
        vorbis_tags["GENRE"] = "Techno"
        assert resolve("genre").extract(make_handle(vorbis_tags)) == "Techno"

    def test_empty_text_field(self, make_handle, vorbis_tags):
        assert resolve("COMPOSER").extract(make_handle(vorbis_tags)) is None

    def test_standard_field_does_not_fall_back(self, make_handle, id3_tags):
        id3_tags.add(TXXX(encoding=3, desc="BPM", text=["140"]))
        assert resolve("BPM").extract(make_handle(id3_tags)) is None


class TestKeyStrategy:
    """Test the musical key lookup order"""

    def test_tkey(self, make_handle, id3_tags):
        id3_tags.add(TKEY(encoding=3, text=['"F#m"']))
        assert resolve("KEY").extract(make_handle(id3_tags)) == "F#m"

    def test_txxx_containing_key(self, make_handle, id3_tags):
        id3_tags.add(TXXX(encoding=3, desc="Musical Key", text=["8A"]))
        assert probe_key(make_handle(id3_tags)) == "8A"

    def test_vorbis_spellings(self, make_handle, vorbis_tags):
        vorbis_tags["INITIAL_KEY"] = "Dm"
        assert resolve("KEY").extract(make_handle(vorbis_tags)) == "Dm"

    def test_standard_initial_key_first(self, make_handle, vorbis_tags):
        vorbis_tags["INITIALKEY"] = "C"
        vorbis_tags["KEY"] = "G"
        assert resolve("KEY").extract(make_handle(vorbis_tags)) == "C"

    def test_no_custom_chain_for_key(self, make_handle, asf_tags):
        asf_tags["KEY"] = "Eb"
        assert resolve("KEY").extract(make_handle(asf_tags)) is None

    def test_asf_initial_key(self, make_handle, asf_tags):
        asf_tags["WM/InitialKey"] = "Eb"
        assert resolve("KEY").extract(make_handle(asf_tags)) == "Eb"

    def test_absent(self, make_handle, id3_tags):
        assert resolve("KEY").extract(make_handle(id3_tags)) is None


class TestSpecialFrameStrategy:
    """Test special fields with a dedicated frame"""

    def test_mood_frame(self, make_handle, id3_tags):
        id3_tags.add(TMOO(encoding=3, text=["Dark", "Dark", "Tense"]))
        assert resolve("MOOD").extract(make_handle(id3_tags)) == "Dark,Tense"

    def test_mood_ignores_txxx(self, make_handle, id3_tags):
        id3_tags.add(TXXX(encoding=3, desc="mood", text=["Calm"]))
        assert resolve("MOOD").extract(make_handle(id3_tags)) is None

    def test_language_ignores_txxx(self, make_handle, id3_tags):
        id3_tags.add(TXXX(encoding=3, desc="LANGUAGE", text=["eng"]))
        assert resolve("LANGUAGE").extract(make_handle(id3_tags)) is None

    def test_content_group(self, make_handle, id3_tags):
        id3_tags.add(TIT1(encoding=3, text=["Peak Time"]))
        assert resolve("CONTENTGROUP").extract(make_handle(id3_tags)) == "Peak Time"

    def test_mood_not_read_from_vorbis(self, make_handle, vorbis_tags):
        vorbis_tags["MOOD"] = "Happy"
        assert resolve("MOOD").extract(make_handle(vorbis_tags)) is None


class TestCustomChain:
    """Test the generic lookup chain"""

    def test_vorbis(self, make_handle, vorbis_tags):
        vorbis_tags["ENERGY"] = ["7", '"7"', "8"]
        assert probe_custom_chain(make_handle(vorbis_tags), "ENERGY") == "7,8"

    def test_mp4_freeform(self, make_handle, mp4_tags):
        mp4_tags["----:com.apple.iTunes:ENERGY"] = [MP4FreeForm(b"6")]
        assert probe_custom_chain(make_handle(mp4_tags), "ENERGY") == "6"

    def test_asf_attribute(self, make_handle, asf_tags):
        asf_tags["Energy"] = [ASFUnicodeAttribute("5")]
        assert probe_custom_chain(make_handle(asf_tags), "ENERGY") == "5"

    def test_txxx_with_quoted_description(self, make_handle, id3_tags):
        id3_tags.add(TXXX(encoding=3, desc='"Energy"', text=["9"]))
        assert probe_custom_chain(make_handle(id3_tags), "ENERGY") == "9"

    def test_friendly_name(self, make_handle, id3_tags):
        id3_tags.add(TFLT(encoding=3, text=["MPG/3"]))
        assert probe_custom_chain(make_handle(id3_tags), "FILETYPE") == "MPG/3"

    def test_raw_frame_id(self, make_handle, id3_tags):
        id3_tags.add(TFLT(encoding=3, text=["MPG/3"]))
        assert probe_custom_chain(make_handle(id3_tags), "TFLT") == "MPG/3"

    def test_txxx_wins_over_friendly_name(self, make_handle, id3_tags):
        id3_tags.add(TXXX(encoding=3, desc="FILETYPE", text=["custom"]))
        id3_tags.add(TFLT(encoding=3, text=["MPG/3"]))
        assert probe_custom_chain(make_handle(id3_tags), "FILETYPE") == "custom"

    def test_standard_table_last(self, make_handle, vorbis_tags):
        vorbis_tags["ORGANIZATION"] = "Warp"
        assert probe_custom_chain(make_handle(vorbis_tags), "LABEL") == "Warp"

    def test_nothing_found(self, make_handle, id3_tags):
        assert probe_custom_chain(make_handle(id3_tags), "ENERGY") is None
        assert probe_custom_chain(make_handle(None), "ENERGY") is None


class TestJoinValues:
    """Test multi-value joining"""

    def test_join(self):
        assert join_values(['"Rock"', "Pop", "Rock", "", "'Pop'"]) == "Rock,Pop"

    def test_case_sensitive(self):
        assert join_values(["Rock", "rock"]) == "Rock,rock"

    def test_empty(self):
        assert join_values([]) is None
        assert join_values(['""']) is None
