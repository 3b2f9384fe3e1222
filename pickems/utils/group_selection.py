"""
Group-stage qualifier selection

A user picks the two teams they expect to advance from a group. The selection
is a bounded FIFO queue: picking a third team pushes out the one picked first.
"""

from collections import deque

GROUP_SELECTION_SIZE = 2


class GroupSelection:
    """Ordered selection of at most ``capacity`` team ids, oldest first"""

    def __init__(self, team_ids=(), capacity=GROUP_SELECTION_SIZE):
        self.capacity = capacity
        self._teams = deque(maxlen=capacity)
        for team_id in team_ids:
            if team_id not in self._teams:
                self._teams.append(team_id)

    def __iter__(self):
        return iter(self._teams)

    def __len__(self):
        return len(self._teams)

    def __contains__(self, team_id):
        return team_id in self._teams

    def __repr__(self):
        return f"<GroupSelection {list(self._teams)}>"

    @property
    def is_full(self):
        return len(self._teams) == self.capacity

    def toggle(self, team_id):
        """
        Select or deselect a team.

        Deselects an already-selected team; otherwise appends it, evicting the
        oldest selection when already at capacity (deque maxlen handles that).

        Returns:
            The evicted team id, or None
        """
        if team_id in self._teams:
            self._teams.remove(team_id)
            return None

        evicted = self._teams[0] if self.is_full else None
        self._teams.append(team_id)
        return evicted

    def as_list(self):
        return list(self._teams)


def toggle_team(selected_teams, team_id, capacity=GROUP_SELECTION_SIZE):
    """Return the selection that results from toggling ``team_id``"""
    selection = GroupSelection(selected_teams, capacity=capacity)
    selection.toggle(team_id)
    return selection.as_list()


def group_pick_highlights(group, selected_teams):
    """
    Per-team display state for a group picker.

    Results are only shown once the group has advancing teams recorded.
    Nothing here touches the stored pick.
    """
    selected = list(selected_teams or [])
    advancing = set(group.advancing_teams or ())
    show_results = bool(advancing)

    rows = []
    for team in group.teams:
        is_selected = team.id in selected
        is_correct = show_results and team.id in advancing
        rows.append(
            {
                "team": team,
                "is_selected": is_selected,
                "selection_order": selected.index(team.id) + 1 if is_selected else None,
                "is_correct": is_correct,
                "is_wrong": show_results and is_selected and not is_correct,
            }
        )
    return rows
