"""
Tests for habit grouping.

Tests:
- create/update/delete validation
- one-group-per-habit invariant
- membership changes
- group suggestions and auto-grouping
"""

import itertools

import pytest

from config import GroupingConfig
from database.manager import HABIT_GROUPS
from models.enums import GroupType
from models.habit import Habit
from services.grouping import GroupingService, extract_keywords


def assert_exclusive(grouping):
    groups = grouping.get_groups().data
    for first, second in itertools.combinations(groups, 2):
        assert not set(first.habit_ids) & set(second.habit_ids)


class TestCreateGroup:

    def test_create_persists_group(self, store, grouping):
        result = grouping.create_group("Evening", ["h1", "h2"], GroupType.TEMPORAL)

        assert result.success
        group = result.data
        assert group.id
        assert group.created_at
        assert group.group_type == "temporal"
        assert store.read_all(HABIT_GROUPS)[group.id]["habit_ids"] == ["h1", "h2"]

    def test_accepts_plain_string_type(self, grouping):
        assert grouping.create_group("G", ["h1"], "difficulty").success

    @pytest.mark.parametrize("name, habit_ids, group_type, message", [
        ("", ["h1"], "manual", "Group name is required"),
        ("   ", ["h1"], "manual", "Group name is required"),
        ("G", [], "manual", "at least one habit"),
        ("G", ["h1"], "weekly", "Invalid group type"),
    ])
    def test_validation(self, grouping, name, habit_ids, group_type, message):
        result = grouping.create_group(name, habit_ids, group_type)

        assert not result.success
        assert result.error_type == "validation_error"
        assert message in result.error

    def test_conflict_names_owning_group(self, grouping):
        assert grouping.create_group("G", ["h1"], "contextual").success
        result = grouping.create_group("G2", ["h1"], "temporal")

        assert not result.success
        assert result.error_type == "conflict_error"
        assert '"G"' in result.error
        assert len(grouping.get_groups().data) == 1


class TestUpdateAndDelete:

    def test_update_keeps_own_habits(self, grouping):
        group = grouping.create_group("G", ["h1", "h2"], "manual").data
        group.habit_ids = ["h1", "h2", "h3"]
        group.name = "Renamed"

        result = grouping.update_group(group)

        assert result.success
        assert grouping.get_group(group.id).data.name == "Renamed"
        assert_exclusive(grouping)

    def test_update_conflicts_with_other_group(self, grouping):
        grouping.create_group("Other", ["h9"], "manual")
        group = grouping.create_group("G", ["h1"], "manual").data
        group.habit_ids = ["h1", "h9"]

        result = grouping.update_group(group)
        assert result.error_type == "conflict_error"
        assert_exclusive(grouping)

    def test_update_unknown_group(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data
        group.id = "missing"

        assert grouping.update_group(group).error_type == "not_found_error"

    def test_update_revalidates(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data
        group.habit_ids = []

        assert grouping.update_group(group).error_type == "validation_error"

    def test_delete_frees_habits(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data

        assert grouping.delete_group(group.id).success
        assert grouping.create_group("G2", ["h1"], "manual").success

    def test_delete_unknown_group(self, grouping):
        result = grouping.delete_group("missing")
        assert result.error_type == "not_found_error"
        assert result.error == "Group not found"


class TestMembership:

    def test_add_habit(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data
        result = grouping.add_habit_to_group(group.id, "h2")

        assert result.success
        assert result.data.habit_ids == ["h1", "h2"]

    def test_add_duplicate_in_same_group_is_error(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data
        result = grouping.add_habit_to_group(group.id, "h1")

        assert not result.success
        assert "already in this group" in result.error

    def test_add_habit_owned_elsewhere(self, grouping):
        grouping.create_group("First", ["h1"], "manual")
        second = grouping.create_group("Second", ["h2"], "manual").data

        result = grouping.add_habit_to_group(second.id, "h1")
        assert result.error_type == "conflict_error"
        assert '"First"' in result.error
        assert_exclusive(grouping)

    def test_remove_habit(self, grouping):
        group = grouping.create_group("G", ["h1", "h2"], "manual").data
        result = grouping.remove_habit_from_group(group.id, "h1")

        assert result.success
        assert result.data.habit_ids == ["h2"]

    def test_remove_non_member(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data
        result = grouping.remove_habit_from_group(group.id, "h5")

        assert not result.success
        assert result.error == "Habit not found in group"

    def test_remove_last_member_keeps_group_non_empty(self, grouping):
        group = grouping.create_group("G", ["h1"], "manual").data
        result = grouping.remove_habit_from_group(group.id, "h1")

        assert result.error_type == "validation_error"
        assert grouping.get_group(group.id).data.habit_ids == ["h1"]


class TestSuggestions:

    def test_keywords(self):
        assert extract_keywords("Put phone on-charger!") == ["put", "phone", "charger"]

    def test_contextual_digital_match(self, grouping):
        grouping.create_group("Digital devices", ["h1"], "contextual")
        result = grouping.suggest_groups_for_habit(Habit(id="h2", name="Turn off phone", type="boolean"))

        assert result.success
        assert len(result.data) == 1
        assert result.data[0].confidence == pytest.approx(0.8)
        assert "contextual similarity" in result.data[0].reason

    def test_learning_bucket(self, grouping):
        grouping.create_group("Study time", ["h1"], "contextual")
        suggestions = grouping.suggest_groups_for_habit(Habit(id="h2", name="Read a book", type="numeric")).data

        assert suggestions[0].confidence == pytest.approx(0.7)

    def test_temporal_prefers_boolean_habits(self, grouping):
        grouping.create_group("Evening", ["h1"], "temporal")

        boolean = grouping.suggest_groups_for_habit(Habit(id="h2", name="Lock door", type="boolean")).data
        numeric = grouping.suggest_groups_for_habit(Habit(id="h3", name="Drink water", type="numeric")).data

        assert boolean[0].confidence == pytest.approx(0.5)
        assert boolean[0].reason == "type compatibility"
        assert numeric == []

    def test_sorted_by_confidence(self, grouping):
        grouping.create_group("Evening", ["h1"], "temporal")
        grouping.create_group("Screen off", ["h2"], "contextual")
        grouping.create_group("Unrelated", ["h3"], "manual")

        suggestions = grouping.suggest_groups_for_habit(
            Habit(id="h4", name="Laptop screen off", type="boolean")
        ).data

        names = [suggestion.group.name for suggestion in suggestions]
        assert names == ["Screen off", "Evening"]
        assert suggestions[0].confidence == 1.0

    def test_custom_vocabulary(self, store):
        grouping = GroupingService(store, GroupingConfig(digital_keywords=("tablet",)))
        grouping.create_group("Tablet stuff", ["h1"], "contextual")

        suggestions = grouping.suggest_groups_for_habit(Habit(id="h2", name="Charge tablet")).data
        assert suggestions and suggestions[0].confidence >= 0.8


class TestAutoGroup:

    def test_single_habit_yields_nothing(self, grouping):
        result = grouping.auto_group_habits([Habit(id="h1", name="Close laptop")])

        assert result.success
        assert result.data.groups == []
        assert result.data.rationale == []

    def test_digital_then_quick_tasks(self, grouping, habits):
        habits = habits + [Habit(id="habit-5", name="Lock door", type="boolean")]
        result = grouping.auto_group_habits(habits)

        digital, quick = result.data.groups
        assert digital.name == "Digital Shutdown"
        assert digital.group_type == "contextual"
        assert digital.habit_ids == ["habit-2", "habit-3"]
        assert quick.name == "Quick Tasks"
        assert quick.group_type == "temporal"
        assert quick.habit_ids == ["habit-1", "habit-5"]
        assert [item.confidence for item in result.data.rationale] == [0.8, 0.6]
        assert result.data.rationale[0].group_id == digital.id

    def test_not_persisted_by_default(self, grouping, habits):
        grouping.auto_group_habits(habits)
        assert grouping.get_groups().data == []

    def test_persist_respects_existing_groups(self, grouping, habits):
        grouping.create_group("Mine", ["habit-2"], "manual")
        result = grouping.auto_group_habits(habits, persist=True)

        assert [group.name for group in result.data.groups] == ["Quick Tasks"]
        assert result.data.groups[0].habit_ids == ["habit-1", "habit-3"]
        assert len(grouping.get_groups().data) == 2
        assert_exclusive(grouping)

    def test_no_qualifying_subgroup(self, grouping):
        habits = [
            Habit(id="a", name="Stretch", type="numeric"),
            Habit(id="b", name="Meditate", type="choice"),
        ]
        result = grouping.auto_group_habits(habits)

        assert result.success
        assert result.data.groups == []

    def test_persisted_groups_go_through_create(self, grouping, habits):
        doubled = habits + [habits[1]]
        result = grouping.auto_group_habits(doubled, persist=True)

        digital = result.data.groups[0]
        assert digital.habit_ids == ["habit-2", "habit-3"]
        assert grouping.get_group(digital.id).data.habit_ids == ["habit-2", "habit-3"]
        assert [group.id for group in grouping.get_groups().data] == [group.id for group in result.data.groups]

    def test_device_alone_does_not_make_digital_group(self, grouping):
        habits = [
            Habit(id="a", name="Charge device", type="boolean"),
            Habit(id="b", name="Close laptop", type="boolean"),
        ]
        groups = grouping.auto_group_habits(habits).data.groups

        assert [group.name for group in groups] == ["Quick Tasks"]
        assert groups[0].habit_ids == ["a", "b"]

    def test_device_still_counts_for_suggestions(self, grouping):
        grouping.create_group("Screen time", ["h1"], "contextual")
        suggestions = grouping.suggest_groups_for_habit(Habit(id="h2", name="Charge device")).data

        assert suggestions[0].confidence == pytest.approx(0.8)
