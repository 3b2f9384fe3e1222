"""
Knockout bracket derivation and layout

Takes the flat match list of a tournament, buckets it into bracket rounds,
splits every round into a left and right half and lays the halves out as a
mirrored tree converging on a centred Final column.

Coordinates are abstract units with the origin at the top-left corner; the
templates and the /api/bracket endpoint draw whatever comes out of here.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from pickems.utils.rounds import BRACKET_STAGES, DEFAULT_POLICY, RoundStage, resolve_stage
from pickems.utils.snapshot import MatchRecord

LEFT = "left"
RIGHT = "right"
CENTER = "center"


@dataclass(frozen=True)
class BracketGeometry:
    match_height: float = 80
    match_width: float = 128
    base_gap: float = 10
    connector_width: float = 30

    @classmethod
    def from_config(cls, config):
        return cls(
            match_height=config.get("BRACKET_MATCH_HEIGHT", cls.match_height),
            match_width=config.get("BRACKET_MATCH_WIDTH", cls.match_width),
            base_gap=config.get("BRACKET_BASE_GAP", cls.base_gap),
            connector_width=config.get("BRACKET_CONNECTOR_WIDTH", cls.connector_width),
        )


DEFAULT_GEOMETRY = BracketGeometry()


@dataclass(frozen=True)
class RoundSplit:
    left: Tuple[MatchRecord, ...]
    right: Tuple[MatchRecord, ...]


@dataclass(frozen=True)
class MatchBox:
    match: MatchRecord
    stage: RoundStage
    side: str
    x: float
    y: float
    width: float
    height: float

    @property
    def center_y(self):
        return self.y + self.height / 2


@dataclass(frozen=True)
class Segment:
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class Connector:
    """Lines joining a parent box to its children, drawn in the gap between columns"""

    stage: RoundStage
    side: str
    mirrored: bool
    segments: Tuple[Segment, ...]


@dataclass(frozen=True)
class BracketColumn:
    stage: RoundStage
    side: str
    x: float
    gap: float
    boxes: Tuple[MatchBox, ...]


@dataclass(frozen=True)
class BracketLayout:
    rounds: Dict[RoundStage, RoundSplit]
    columns: Tuple[BracketColumn, ...]
    connectors: Tuple[Connector, ...]
    width: float
    height: float
    geometry: BracketGeometry

    @property
    def is_empty(self):
        return not self.columns

    def column(self, stage, side):
        return next(
            (c for c in self.columns if c.stage == stage and c.side == side), None
        )

    def to_dict(self):
        return {
            "width": self.width,
            "height": self.height,
            "geometry": {
                "match_height": self.geometry.match_height,
                "match_width": self.geometry.match_width,
                "base_gap": self.geometry.base_gap,
                "connector_width": self.geometry.connector_width,
            },
            "columns": [
                {
                    "stage": column.stage.value,
                    "side": column.side,
                    "x": column.x,
                    "gap": column.gap,
                    "boxes": [
                        {
                            "match_id": box.match.id,
                            "round": box.match.round,
                            "x": box.x,
                            "y": box.y,
                            "width": box.width,
                            "height": box.height,
                        }
                        for box in column.boxes
                    ],
                }
                for column in self.columns
            ],
            "connectors": [
                {
                    "stage": connector.stage.value,
                    "side": connector.side,
                    "mirrored": connector.mirrored,
                    "segments": [
                        [s.x1, s.y1, s.x2, s.y2] for s in connector.segments
                    ],
                }
                for connector in self.connectors
            ],
        }


def partition_rounds(matches, policy=DEFAULT_POLICY):
    """
    Bucket matches into bracket rounds, keeping arrival order.

    Matches whose round cannot be classified are left out.
    """
    rounds = {stage: [] for stage in BRACKET_STAGES}
    for match in matches:
        stage = resolve_stage(match, policy)
        if stage in rounds:
            rounds[stage].append(match)
    return rounds


def split_half(matches):
    """First ceil(N/2) matches go left, the rest right"""
    mid = math.ceil(len(matches) / 2)
    return tuple(matches[:mid]), tuple(matches[mid:])


def _child_ranges(child_count, parent_count):
    fan_in = max(1, math.ceil(child_count / parent_count))
    return [
        range(j * fan_in, min((j + 1) * fan_in, child_count))
        for j in range(parent_count)
    ]


def _stack(count, geometry, start=0.0):
    pitch = geometry.match_height + geometry.base_gap
    return [start + i * pitch for i in range(count)]


def _centre_on_children(child_ys, parent_count, geometry):
    half = geometry.match_height / 2
    ys = []
    for children in _child_ranges(len(child_ys), parent_count):
        if len(children):
            centres = [child_ys[i] + half for i in children]
            ys.append((min(centres) + max(centres)) / 2 - half)
        elif ys:
            ys.append(ys[-1] + geometry.match_height + geometry.base_gap)
        else:
            ys.append(0.0)
    return ys


def _side_positions(columns, geometry):
    """Top edge of every box, column by column, outermost round first"""
    positions = []
    for matches in columns:
        if not positions:
            positions.append(_stack(len(matches), geometry))
        else:
            positions.append(_centre_on_children(positions[-1], len(matches), geometry))
    return positions


def _column_gap(ys, geometry):
    if len(ys) < 2:
        return 0.0
    return ys[1] - ys[0] - geometry.match_height


def _connector(children, parent, side, geometry):
    mirrored = side == RIGHT
    if mirrored:
        child_edge = children[0].x
        parent_edge = parent.x + geometry.match_width
    else:
        child_edge = children[0].x + geometry.match_width
        parent_edge = parent.x
    mid_x = (child_edge + parent_edge) / 2

    centres = [child.center_y for child in children]
    top, bottom = min(centres), max(centres)
    joint = (top + bottom) / 2

    segments = [Segment(child_edge, y, mid_x, y) for y in centres]
    if bottom > top:
        segments.append(Segment(mid_x, top, mid_x, bottom))
    segments.append(Segment(mid_x, joint, parent_edge, joint))

    return Connector(
        stage=parent.stage, side=side, mirrored=mirrored, segments=tuple(segments)
    )


def derive_bracket(matches, geometry=DEFAULT_GEOMETRY, policy=DEFAULT_POLICY):
    """
    Build the full bracket layout for a list of matches.

    Args:
        matches: iterable of MatchRecord, in display order (e.g. by match number)
        geometry: BracketGeometry
        policy: RoundPolicy used to classify round labels

    Returns:
        BracketLayout. Empty rounds produce no column and no connectors.
    """
    rounds = partition_rounds(matches, policy)
    side_stages = [s for s in BRACKET_STAGES if s != RoundStage.FINAL]
    finals = rounds[RoundStage.FINAL]

    splits = {}
    for stage in side_stages:
        left, right = split_half(rounds[stage])
        if left or right:
            splits[stage] = RoundSplit(left=left, right=right)
    if finals:
        splits[RoundStage.FINAL] = RoundSplit(left=tuple(finals), right=())

    left_stages = [s for s in side_stages if s in splits and splits[s].left]
    right_stages = [s for s in side_stages if s in splits and splits[s].right]

    left_ys = _side_positions([splits[s].left for s in left_stages], geometry)
    right_ys = _side_positions([splits[s].right for s in right_stages], geometry)

    final_ys = []
    if finals:
        anchors = [
            y + geometry.match_height / 2
            for ys in (left_ys, right_ys)
            if ys
            for y in ys[-1]
        ]
        if anchors:
            top = (min(anchors) + max(anchors)) / 2 - geometry.match_height / 2
        else:
            top = 0.0
        final_ys = _stack(len(finals), geometry, start=top)

    # Left to right: left half outermost first, Final, right half innermost first
    sequence = [(LEFT, s, splits[s].left, ys) for s, ys in zip(left_stages, left_ys)]
    if finals:
        sequence.append((CENTER, RoundStage.FINAL, tuple(finals), final_ys))
    sequence += [
        (RIGHT, s, splits[s].right, ys)
        for s, ys in reversed(list(zip(right_stages, right_ys)))
    ]

    pitch_x = geometry.match_width + geometry.connector_width
    columns = []
    for index, (side, stage, column_matches, ys) in enumerate(sequence):
        x = index * pitch_x
        boxes = tuple(
            MatchBox(
                match=match,
                stage=stage,
                side=side,
                x=x,
                y=y,
                width=geometry.match_width,
                height=geometry.match_height,
            )
            for match, y in zip(column_matches, ys)
        )
        columns.append(
            BracketColumn(
                stage=stage, side=side, x=x, gap=_column_gap(ys, geometry), boxes=boxes
            )
        )

    connectors = []
    for side in (LEFT, RIGHT):
        side_columns = _side_columns(columns, side)
        for child_col, parent_col in zip(side_columns, side_columns[1:]):
            ranges = _child_ranges(len(child_col.boxes), len(parent_col.boxes))
            for parent, children in zip(parent_col.boxes, ranges):
                if len(children):
                    connectors.append(
                        _connector(
                            [child_col.boxes[i] for i in children], parent, side, geometry
                        )
                    )

    final_col = _final_column(columns)
    if final_col is not None:
        for side in (LEFT, RIGHT):
            side_columns = _side_columns(columns, side)
            if side_columns:
                innermost = side_columns[-1]
                connectors.append(
                    _connector(list(innermost.boxes), final_col.boxes[0], side, geometry)
                )

    if columns:
        width = columns[-1].x + geometry.match_width
        height = max(box.y + box.height for column in columns for box in column.boxes)
    else:
        width = height = 0.0

    return BracketLayout(
        rounds=splits,
        columns=tuple(columns),
        connectors=tuple(connectors),
        width=width,
        height=height,
        geometry=geometry,
    )


def _final_column(columns) -> Optional[BracketColumn]:
    return next((c for c in columns if c.side == CENTER), None)


def _side_columns(columns, side):
    """Columns of one half, outermost round first"""
    return sorted(
        (c for c in columns if c.side == side),
        key=lambda c: BRACKET_STAGES.index(c.stage),
    )
