"""Test the tag merge engine"""

from music_tags.tagging.merge import merge_tags


class TestMergeWithoutOverwrite:
    """Test merging with overwrite disabled"""

    def test_new_name_appended(self):
        """Test a tag with an unseen Name is appended"""
        result = merge_tags(["GENRE:Rock"], ["BPM:128"], overwrite=False)
        assert result.tags == ["GENRE:Rock", "BPM:128"]
        assert result.modified
        assert result.added == ["BPM:128"]

    def test_existing_name_skipped(self):
        """Test a tag whose Name exists is skipped, case-insensitively"""
        result = merge_tags(["bpm:120"], ["BPM:128", "KEY:Am"], overwrite=False)
        assert result.tags == ["bpm:120", "KEY:Am"]
        assert result.skipped == ["BPM:128"]

    def test_nothing_new(self):
        """Test an all-skipped batch is not a modification"""
        result = merge_tags(["BPM:120"], ["BPM:128"], overwrite=False)
        assert result.tags == ["BPM:120"]
        assert not result.modified

    def test_empty_batch(self):
        """Test an empty batch leaves tags alone"""
        result = merge_tags(["BPM:120"], [], overwrite=False)
        assert result.tags == ["BPM:120"]
        assert not result.modified

    def test_split_values_all_appended(self):
        """Test several new tags sharing a Name are all kept"""
        result = merge_tags([], ["GENRE:Rock", "GENRE:Pop"], overwrite=False)
        assert result.tags == ["GENRE:Rock", "GENRE:Pop"]

    def test_duplicate_in_batch_appended_once(self):
        """Test identical new tags are added once"""
        result = merge_tags([], ["MOOD:Calm", "MOOD:Calm"], overwrite=False)
        assert result.tags == ["MOOD:Calm"]

    def test_invalid_tag_dropped(self):
        """Test a new tag without a colon is ignored"""
        result = merge_tags([], ["garbage", "BPM:128"], overwrite=False)
        assert result.tags == ["BPM:128"]

    def test_inputs_not_mutated(self):
        """Test neither input list changes"""
        existing = ["BPM:120"]
        new = ["KEY:Am"]
        merge_tags(existing, new, overwrite=True)
        assert existing == ["BPM:120"]
        assert new == ["KEY:Am"]


class TestMergeWithOverwrite:
    """Test merging with overwrite enabled"""

    def test_replaces_every_tag_of_name(self):
        """Test all existing tags of the Name go, others keep their order"""
        existing = ["GENRE:Rock", "BPM:120", "genre:Pop", "KEY:C"]
        result = merge_tags(existing, ["GENRE:Jazz"], overwrite=True)
        assert result.tags == ["BPM:120", "KEY:C", "GENRE:Jazz"]
        assert result.modified

    def test_split_values_replace_together(self):
        """Test the second value of a Name does not remove the first"""
        result = merge_tags(["GENRE:Rock"], ["GENRE:Jazz", "GENRE:Funk"], overwrite=True)
        assert result.tags == ["GENRE:Jazz", "GENRE:Funk"]

    def test_rerun_same_value(self):
        """Test overwriting with the identical value still replaces it"""
        result = merge_tags(["BPM:128"], ["BPM:128"], overwrite=True)
        assert result.tags == ["BPM:128"]
        assert result.modified

    def test_tags_without_colon_survive(self):
        """Test invalid existing tags are never matched"""
        result = merge_tags(["legacy", "BPM:120"], ["BPM:128"], overwrite=True)
        assert result.tags == ["legacy", "BPM:128"]
