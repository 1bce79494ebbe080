"""Tests for the truncated prefix version comparison and LATEST pinning."""

import pytest

from versioning.comparator import is_newer, pin_latest


class TestIsNewer:
    """Tests for is_newer()."""

    def test_minor_bump_is_newer(self):
        assert is_newer("1.2.3", "1.3.0") is True

    def test_older_minor_is_not_newer(self):
        assert is_newer("1.2.3", "1.1.9") is False

    def test_patch_only_difference_is_ignored(self):
        assert is_newer("2.0.0", "2.0.5") is False

    @pytest.mark.parametrize("current,candidate", [
        ("1.2.3", "1.2.9"),
        ("1.2.0.LATEST", "1.2.0.15"),
        ("4.0.0.1", "4.0.0.99"),
    ])
    def test_last_segment_never_compared(self, current, candidate):
        assert is_newer(current, candidate) is False

    @pytest.mark.parametrize("current,candidate", [("1", "5"), ("7", "2"), ("3", "3")])
    def test_single_segment_is_never_newer(self, current, candidate):
        assert is_newer(current, candidate) is False

    def test_latest_placeholder_in_manifest(self):
        assert is_newer("1.2.0.LATEST", "1.3.0.4") is True
        assert is_newer("1.2.0.LATEST", "1.2.1.4") is True

    def test_unparsable_segments_count_as_not_greater(self):
        assert is_newer("1.x.0", "1.5.0") is False
        assert is_newer("1.2.0", "1.y.0") is False
        assert is_newer("a.b.c", "9.9.9") is False

    def test_segments_read_leading_ascii_digits_only(self):
        assert is_newer("1.5.0", "1.1_0.0") is False
        assert is_newer("1.1.0", "1.2beta.0") is True
        assert is_newer("1.0.0", "1.\u0665.0") is False

    def test_unparsable_segment_does_not_stop_later_comparison(self):
        assert is_newer("1.x.2.0", "1.5.3.0") is True

    def test_shorter_candidate(self):
        assert is_newer("1.2.3.4", "2") is True
        assert is_newer("1.2.3.4", "1") is False

    def test_lower_leading_segment_does_not_stop_scan(self):
        # The first greater segment decides even after a lower one.
        assert is_newer("2.1.0", "1.5.0") is True


class TestPinLatest:
    """Tests for pin_latest()."""

    @pytest.mark.parametrize("version,expected", [
        ("3.4.2", "3.4.LATEST"),
        ("1.2.0.7", "1.2.0.LATEST"),
        ("10.0", "10.LATEST"),
        ("7", "LATEST"),
    ])
    def test_replaces_final_segment(self, version, expected):
        assert pin_latest(version) == expected
