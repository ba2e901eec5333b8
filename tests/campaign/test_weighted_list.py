"""
Tests for WeightedList character/thread bookkeeping.
"""

import pytest

from solo_oracle.campaign.campaign_engine import CharacterEntry, ThreadEntry
from solo_oracle.campaign.weighted_list import (
    MAX_WEIGHT,
    WeightedEntity,
    WeightedList,
    normalize_key,
)


@pytest.fixture
def characters():
    entries = WeightedList(factory=CharacterEntry)
    entries.add_new(["Alyx", "Borin"])
    return entries


class TestAddNew:
    """Inserting new entities."""

    def test_add_assigns_weight_one(self, characters):
        assert characters.names() == ["Alyx", "Borin"]
        assert all(entity.weight == 1 for entity in characters)
        assert isinstance(characters.get("alyx"), CharacterEntry)

    def test_duplicate_by_key_ignored(self, characters):
        added = characters.add_new(["ALYX", "  alyx  ", "Cass"])
        assert [entity.name for entity in added] == ["Cass"]
        assert characters.names() == ["Alyx", "Borin", "Cass"]

    def test_duplicate_within_one_call(self):
        entries = WeightedList()
        entries.add_new(["Dana", "dana"])
        assert entries.names() == ["Dana"]

    def test_names_trimmed_and_empty_skipped(self):
        entries = WeightedList()
        entries.add_new(["  Eli  ", "", "   "])
        assert entries.names() == ["Eli"]
        assert entries.get("eli").key == "eli"

    def test_display_name_preserved(self, characters):
        characters.add_new(["alyx"])
        assert characters.get("ALYX").name == "Alyx"


class TestFeatureExisting:
    """Weight increments."""

    def test_each_occurrence_counts(self, characters):
        characters.feature_existing(["alyx"])
        assert characters.get("Alyx").weight == 2
        characters.feature_existing(["alyx", "ALYX"])
        assert characters.get("Alyx").weight == MAX_WEIGHT

    def test_weight_capped(self, characters):
        characters.feature_existing(["Borin"] * 10)
        assert characters.get("Borin").weight == 3

    def test_unknown_names_not_inserted(self, characters):
        characters.feature_existing(["Zed", ""])
        assert len(characters) == 2


class TestRemove:
    """Removal by normalized key."""

    def test_remove_case_insensitive(self, characters):
        characters.remove(["borin"])
        assert characters.names() == ["Alyx"]
        assert "Borin" not in characters

    def test_remove_unknown_is_noop(self, characters):
        characters.remove(["Zed", ""])
        assert len(characters) == 2


class TestQueries:
    """Lookup, ordering and serialization."""

    def test_contains(self, characters):
        assert "ALYX" in characters
        assert 42 not in characters

    def test_sorted_by_weight_is_stable(self, characters):
        characters.add_new(["Cass"])
        characters.feature_existing(["Cass", "Cass"])
        assert [e.name for e in characters.sorted_by_weight()] == ["Cass", "Alyx", "Borin"]

    def test_entries_is_a_copy(self, characters):
        characters.entries.clear()
        assert len(characters) == 2

    def test_round_trip(self, characters):
        characters.feature_existing(["Alyx"])
        data = characters.to_list()
        assert data == [{"name": "Alyx", "weight": 2}, {"name": "Borin", "weight": 1}]

        restored = WeightedList.from_list(data, factory=CharacterEntry)
        assert restored.names() == ["Alyx", "Borin"]
        assert restored.get("alyx").weight == 2
        assert isinstance(restored.get("borin"), CharacterEntry)

    def test_load_keeps_one_entry_per_key(self):
        restored = WeightedList.from_list(
            [{"name": "Alyx", "weight": 1}, {"name": "ALYX", "weight": 2}, {"name": "  ", "weight": 1}],
            factory=CharacterEntry,
        )
        assert restored.names() == ["Alyx"]
        assert restored.get("alyx").weight == 1

    def test_load_clamps_weight(self):
        restored = WeightedList.from_list([{"name": "Alyx", "weight": 9}, {"name": "Borin", "weight": 0}])
        assert restored.get("alyx").weight == MAX_WEIGHT
        assert restored.get("borin").weight == 1

    def test_threads_use_same_rules(self):
        threads = WeightedList(factory=ThreadEntry)
        threads.add_new(["Find the lost heir"])
        threads.feature_existing(["find the lost heir"])
        assert threads.get("FIND THE LOST HEIR").weight == 2


def test_normalize_key():
    assert normalize_key("  The Grey Lady ") == "the grey lady"


def test_entity_key_derived():
    entity = WeightedEntity("  Mixed Case")
    assert entity.key == "mixed case"
    assert entity.to_dict() == {"name": "  Mixed Case", "weight": 1}
