"""Tests for roster name matching and rank/badge extraction from recognized text."""

import pytest

from roster_scanner.core.types import Character, Rarity
from roster_scanner.ocr.regexes import parse_badge, parse_rank
from roster_scanner.ocr.text_match import TextMatcher, contains_name, name_confidence, normalize


@pytest.fixture
def batman_only():
    return TextMatcher([Character("batman", "Batman", Rarity.LEGENDARY)])


class TestNormalize:

    @pytest.mark.parametrize("text, expected", [
        ("Wonder Woman", "wonderwoman"),
        ("harley_quinn", "harleyquinn"),
        ("Green-Lantern  Rank 4", "greenlanternrank4"),
        ("", ""),
    ])
    def test_normalize(self, text, expected):
        assert normalize(text) == expected


class TestContainsName:

    def test_substring(self):
        assert contains_name("batmanrank10", "batman")

    def test_loose_overlap_meets_threshold(self):
        # 5 of 6 letters present, threshold int(6 * 0.7) == 4
        assert contains_name("cybrg", "cyborg")

    def test_loose_overlap_below_threshold(self):
        assert not contains_name("joker12", "batman")

    def test_single_letter_name_needs_that_letter(self):
        assert contains_name("xyz", "x")
        assert not contains_name("abc", "x")

    def test_empty_name_never_matches(self):
        assert not contains_name("anything", "")

    def test_confidence(self):
        assert name_confidence("batmanrank10", "batman") == 1.0
        assert name_confidence("cybrg", "cyborg") == pytest.approx(5 / 6)


class TestTextMatcher:

    def test_rank_line_matches_character(self, batman_only):
        matches = batman_only.match("Batman Rank 10")

        assert len(matches) == 1
        match = matches[0]
        assert match.character_id == "batman"
        assert match.character_name == "Batman"
        assert match.confidence == 1.0
        assert match.rank == 10
        assert match.line == "Batman Rank 10"

    def test_first_occurrence_wins(self, batman_only):
        matches = batman_only.match("Batman\nBatman Rank 3")

        assert len(matches) == 1
        assert matches[0].rank == 1
        assert matches[0].line == "Batman"

    def test_no_duplicate_ids(self):
        matcher = TextMatcher([
            Character("batman", "Batman", Rarity.LEGENDARY),
            Character("cyborg", "Cyborg", Rarity.EPIC),
        ])

        matches = matcher.match("Batman R2\nCyborg\nBatman R5\nCybrg\nCyborg B12")

        ids = [m.character_id for m in matches]
        assert sorted(ids) == ["batman", "cyborg"]

    def test_sorted_by_confidence(self):
        matcher = TextMatcher([
            Character("cyborg", "Cyborg", Rarity.EPIC),
            Character("batman", "Batman", Rarity.LEGENDARY),
        ])

        matches = matcher.match("Cybrg\nBatman")

        assert [m.character_id for m in matches] == ["batman", "cyborg"]
        assert matches[1].confidence == pytest.approx(5 / 6)

    def test_separators_ignored(self):
        matcher = TextMatcher([Character("wonderwoman", "Wonder Woman", Rarity.LEGENDARY)])

        matches = matcher.match("wonder-woman lvl 7")

        assert matches[0].character_id == "wonderwoman"
        assert matches[0].confidence == 1.0
        assert matches[0].rank == 7

    def test_badge_clamped_to_rarity(self):
        matcher = TextMatcher([Character("aquaman", "Aquaman", Rarity.EPIC)])

        matches = matcher.match("Aquaman R3 B45")

        assert matches[0].rank == 3
        assert matches[0].badge_level == 30

    def test_defaults_without_numbers(self, batman_only):
        match = batman_only.match("  Batman  ")[0]

        assert match.rank == 1
        assert match.badge_level == 1

    @pytest.mark.parametrize("text", [None, "", "   \n  ", "Joker 12"])
    def test_no_matches(self, batman_only, text):
        assert batman_only.match(text) == []


class TestParseRank:

    @pytest.mark.parametrize("text, expected", [
        ("Batman Rank 10", 10),
        ("Superman R22", 15),
        ("Lvl 7 Cyborg", 7),
        ("Level 0", 1),
        ("Flash 4", 4),
        ("Batman Badge 25 Rank 9", 9),
        ("Cyborg", None),
        ("Cyborg 123", None),
        ("Batman Rank 100", None),
    ])
    def test_parse_rank(self, text, expected):
        assert parse_rank(text) == expected


class TestParseBadge:

    @pytest.mark.parametrize("text, max_badge, expected", [
        ("Aquaman Rank 3 Badge 25", 30, 25),
        ("Aquaman B45", 30, 30),
        ("Batman B45", 40, 40),
        ("Batman 12", 40, 12),
        ("Batman", 40, None),
    ])
    def test_parse_badge(self, text, max_badge, expected):
        assert parse_badge(text, max_badge) == expected
