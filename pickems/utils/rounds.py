"""
Round classification for knockout matches

Match rounds are free-text labels such as "Quarter Finals - Match 2". The
stage a label belongs to is decided by case-sensitive substring checks in a
fixed precedence order, and the same classifier drives both the bracket
layout and the points table, so the two can never disagree.
"""

from dataclasses import dataclass
from enum import Enum


class RoundStage(str, Enum):
    ROUND_OF_16 = "round_of_16"
    QUARTERFINAL = "quarterfinal"
    SEMIFINAL = "semifinal"
    FINAL = "final"
    UNCLASSIFIED = "unclassified"

    @property
    def label(self):
        return STAGE_LABELS[self]


STAGE_LABELS = {
    RoundStage.ROUND_OF_16: "Round of 16",
    RoundStage.QUARTERFINAL: "Quarterfinals",
    RoundStage.SEMIFINAL: "Semifinals",
    RoundStage.FINAL: "Final",
    RoundStage.UNCLASSIFIED: "Other",
}

# Bracket order, outermost round first
BRACKET_STAGES = (
    RoundStage.ROUND_OF_16,
    RoundStage.QUARTERFINAL,
    RoundStage.SEMIFINAL,
    RoundStage.FINAL,
)

ROUND_POINTS = {
    RoundStage.ROUND_OF_16: 10,
    RoundStage.QUARTERFINAL: 20,
    RoundStage.SEMIFINAL: 30,
    RoundStage.FINAL: 50,
}
DEFAULT_ROUND_POINTS = 10

GROUP_PICK_POINTS = 5


@dataclass(frozen=True)
class RoundPolicy:
    """
    Which words keep a label containing "Final" out of the Final bucket.

    "Semi" and "Quarter" are always excluded. Placement matches ("Third",
    "Bronze") are excluded only when ``exclude_placement_matches`` is set;
    with it off, "Third Place Final" counts as the Final.
    """

    exclude_placement_matches: bool = True

    @property
    def final_exclusions(self):
        exclusions = ("Semi", "Quarter")
        if self.exclude_placement_matches:
            exclusions += ("Third", "Bronze")
        return exclusions

    @classmethod
    def from_config(cls, config):
        return cls(
            exclude_placement_matches=config.get(
                "ROUND_EXCLUDE_PLACEMENT_FROM_FINAL", True
            )
        )


DEFAULT_POLICY = RoundPolicy()


def classify_round(round_label, policy=DEFAULT_POLICY):
    """Map a round label to a RoundStage. Never raises."""
    label = round_label or ""

    if "Final" in label and not any(
        word in label for word in policy.final_exclusions
    ):
        return RoundStage.FINAL
    if "Semi" in label:
        return RoundStage.SEMIFINAL
    if "Quarter" in label:
        return RoundStage.QUARTERFINAL
    if "Round of 16" in label:
        return RoundStage.ROUND_OF_16
    return RoundStage.UNCLASSIFIED


def resolve_stage(match, policy=DEFAULT_POLICY):
    """Use the stage stored on the match when present, else classify its label"""
    if match.stage:
        try:
            return RoundStage(match.stage)
        except ValueError:
            pass
    return classify_round(match.round, policy)


def points_for_stage(stage):
    return ROUND_POINTS.get(stage, DEFAULT_ROUND_POINTS)


def points_for_round(round_label, policy=DEFAULT_POLICY):
    return points_for_stage(classify_round(round_label, policy))
