"""
Path Router - smooth edge curves from anchor geometry

Pure function of the two anchor points and the sides they face. Recomputed
by the host whenever an endpoint moves; nothing is stored.

Routing cases, checked in order:
1. very close endpoints   -> one quadratic bowed sideways
2. backward edge          -> two cubics stepping around a side column
3. same-row endpoints     -> one quadratic arc below the pair
4. ordinary forward edge  -> one vertical cubic
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional
import math

from prompt_canvas.graph.types import Point, Rect


class Facing(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"


class CurveKind(str, Enum):
    CLOSE = "close"
    STEP_AROUND = "step_around"
    SAME_LEVEL = "same_level"
    FORWARD = "forward"


@dataclass
class RouterConfig:
    close_distance: float = 100.0
    close_offset_min: float = 30.0
    close_offset_ratio: float = 0.3
    side_offset_min: float = 80.0
    side_offset_max: float = 150.0
    side_offset_ratio: float = 0.5
    vertical_padding_min: float = 40.0
    vertical_padding_ratio: float = 0.2
    same_level_dy: float = 50.0
    arc_height_min: float = 60.0
    arc_height_ratio: float = 0.3
    curvature_ratio: float = 0.25
    curvature_max: float = 60.0


@dataclass
class CurveSegment:
    """A quadratic (one control) or cubic (two controls) segment ending at *end*."""
    controls: List[Point]
    end: Point

    @property
    def command(self) -> str:
        return "Q" if len(self.controls) == 1 else "C"


@dataclass
class CurveDescriptor:
    kind: CurveKind
    start: Point
    segments: List[CurveSegment] = field(default_factory=list)

    @property
    def end(self) -> Point:
        return self.segments[-1].end if self.segments else self.start

    @property
    def label_point(self) -> Point:
        # branch toggle sits halfway between the anchors
        return Point((self.start.x + self.end.x) / 2, (self.start.y + self.end.y) / 2)

    def to_svg_path(self) -> str:
        parts = [f"M {_fmt(self.start.x)} {_fmt(self.start.y)}"]
        for segment in self.segments:
            points = ", ".join(f"{_fmt(p.x)} {_fmt(p.y)}" for p in segment.controls + [segment.end])
            parts.append(f"{segment.command} {points}")
        return " ".join(parts)


def _fmt(value: float) -> str:
    return f"{value:g}"


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def handle_point(box: Rect, facing: Facing) -> Point:
    """Connection handle at the middle of the given side of a node box."""
    if facing == Facing.TOP:
        return Point(box.x + box.width / 2, box.y)
    if facing == Facing.BOTTOM:
        return Point(box.x + box.width / 2, box.bottom)
    if facing == Facing.LEFT:
        return Point(box.x, box.y + box.height / 2)
    return Point(box.right, box.y + box.height / 2)


def is_backward(source: Point, target: Point, source_facing: Facing, target_facing: Facing) -> bool:
    """Target sits above a bottom-facing source while itself facing up."""
    return (
        source_facing == Facing.BOTTOM
        and target_facing == Facing.TOP
        and target.y - source.y < 0
    )


def route(
    source: Point,
    target: Point,
    source_facing: Facing = Facing.BOTTOM,
    target_facing: Facing = Facing.TOP,
    config: Optional[RouterConfig] = None,
) -> CurveDescriptor:
    config = config or RouterConfig()
    dx = target.x - source.x
    dy = target.y - source.y
    distance = math.hypot(dx, dy)

    start = Point(source.x, source.y)
    end = Point(target.x, target.y)

    if distance < config.close_distance:
        mid_x = (source.x + target.x) / 2
        mid_y = (source.y + target.y) / 2
        offset = max(config.close_offset_min, distance * config.close_offset_ratio)
        control = Point(mid_x - offset if dx > 0 else mid_x + offset, mid_y)
        return CurveDescriptor(CurveKind.CLOSE, start, [CurveSegment([control], end)])

    if is_backward(source, target, Facing(source_facing), Facing(target_facing)):
        span = abs(dy)
        side_offset = _clamp(
            span * config.side_offset_ratio, config.side_offset_min, config.side_offset_max
        )
        padding = max(config.vertical_padding_min, span * config.vertical_padding_ratio)
        if dx >= 0:
            side_x = max(source.x, target.x) + side_offset
        else:
            side_x = min(source.x, target.x) - side_offset
        turn = Point(side_x, (source.y + target.y) / 2)
        return CurveDescriptor(
            CurveKind.STEP_AROUND,
            start,
            [
                CurveSegment(
                    [Point(source.x, source.y + padding), Point(side_x, source.y + padding)],
                    turn,
                ),
                CurveSegment(
                    [Point(side_x, target.y - padding), Point(target.x, target.y - padding)],
                    end,
                ),
            ],
        )

    if abs(dy) < config.same_level_dy:
        arc_height = max(config.arc_height_min, abs(dx) * config.arc_height_ratio)
        control = Point((source.x + target.x) / 2, max(source.y, target.y) + arc_height)
        return CurveDescriptor(CurveKind.SAME_LEVEL, start, [CurveSegment([control], end)])

    curvature = _clamp(distance * config.curvature_ratio, 0, config.curvature_max)
    return CurveDescriptor(
        CurveKind.FORWARD,
        start,
        [
            CurveSegment(
                [Point(source.x, source.y + curvature), Point(target.x, target.y - curvature)],
                end,
            )
        ],
    )
