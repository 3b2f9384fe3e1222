import itertools

from pickems.utils.group_selection import (
    GroupSelection,
    group_pick_highlights,
    toggle_team,
)
from pickems.utils.snapshot import GroupRecord, TeamRecord

TEAMS = tuple(TeamRecord(id=i, name=f"Team {i}") for i in (1, 2, 3, 4))


def test_select_up_to_two():
    assert toggle_team([], 1) == [1]
    assert toggle_team([1], 2) == [1, 2]


def test_third_pick_evicts_oldest():
    assert toggle_team([1, 2], 3) == [2, 3]
    assert toggle_team([2, 3], 1) == [3, 1]


def test_toggle_selected_team_removes_it():
    assert toggle_team([1, 2], 1) == [2]
    assert toggle_team([2], 2) == []


def test_toggle_does_not_mutate_input():
    current = [1, 2]
    toggle_team(current, 3)
    assert current == [1, 2]


def test_toggle_reports_eviction():
    selection = GroupSelection([1, 2])
    assert selection.is_full
    assert selection.toggle(3) == 1
    assert selection.as_list() == [2, 3]
    assert selection.toggle(4) == 2
    assert selection.toggle(4) is None
    assert list(selection) == [3]


def test_length_never_exceeds_capacity_for_any_sequence():
    for sequence in itertools.product([1, 2, 3, 4], repeat=5):
        selection = []
        for team_id in sequence:
            before = len(selection)
            was_selected = team_id in selection
            selection = toggle_team(selection, team_id)
            assert len(selection) <= 2
            if was_selected:
                assert len(selection) == before - 1


def test_duplicate_ids_are_collapsed():
    assert GroupSelection([1, 1, 2]).as_list() == [1, 2]


def test_highlights_hidden_until_group_resolved():
    group = GroupRecord(id=1, name="Group A", teams=TEAMS)
    rows = group_pick_highlights(group, [3, 1])

    assert [row["is_selected"] for row in rows] == [True, False, True, False]
    assert [row["selection_order"] for row in rows] == [2, None, 1, None]
    assert not any(row["is_correct"] or row["is_wrong"] for row in rows)


def test_highlights_after_group_resolved():
    group = GroupRecord(id=1, name="Group A", teams=TEAMS, advancing_teams=(1, 2))
    selected = [1, 3]
    rows = {row["team"].id: row for row in group_pick_highlights(group, selected)}

    assert rows[1]["is_correct"] and not rows[1]["is_wrong"]
    assert rows[2]["is_correct"] and not rows[2]["is_selected"]
    assert rows[3]["is_wrong"] and not rows[3]["is_correct"]
    assert not rows[4]["is_wrong"] and not rows[4]["is_correct"]
    assert selected == [1, 3]
