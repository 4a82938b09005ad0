from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np

from ..config import LandmarkConfig
from ..fv_types import ColorClass, Landmark, LandmarkKind

BALL_COLORS = (ColorClass.ORANGE, ColorClass.ORANGE_RED, ColorClass.ORANGE_YELLOW)


@dataclass(frozen=True)
class GoalSpec:
    colors: tuple[ColorClass, ...]
    left: LandmarkKind
    right: LandmarkKind
    generic: LandmarkKind
    crossbar: LandmarkKind


GOALS = (
    GoalSpec(
        (ColorClass.BLUE,),
        LandmarkKind.BLUE_GOAL_LEFT_POST,
        LandmarkKind.BLUE_GOAL_RIGHT_POST,
        LandmarkKind.BLUE_GOAL_POST,
        LandmarkKind.BLUE_CROSSBAR,
    ),
    GoalSpec(
        (ColorClass.YELLOW,),
        LandmarkKind.YELLOW_GOAL_LEFT_POST,
        LandmarkKind.YELLOW_GOAL_RIGHT_POST,
        LandmarkKind.YELLOW_GOAL_POST,
        LandmarkKind.YELLOW_CROSSBAR,
    ),
)


@dataclass(frozen=True)
class Blob:
    x: int
    y: int
    w: int
    h: int
    area: int

    @property
    def center_x(self) -> float:
        return self.x + self.w / 2.0


def _mask(classified: np.ndarray, colors) -> np.ndarray:
    return np.isin(classified, [int(c) for c in colors]).astype(np.uint8)


def _blobs(mask: np.ndarray) -> list[Blob]:
    """Connected components, largest first; ties broken top-left first."""
    n, _labels, stats, _centroids = cv2.connectedComponentsWithStats(mask, connectivity=8)
    blobs = [
        Blob(
            int(stats[i, cv2.CC_STAT_LEFT]),
            int(stats[i, cv2.CC_STAT_TOP]),
            int(stats[i, cv2.CC_STAT_WIDTH]),
            int(stats[i, cv2.CC_STAT_HEIGHT]),
            int(stats[i, cv2.CC_STAT_AREA]),
        )
        for i in range(1, n)
    ]
    blobs.sort(key=lambda b: (-b.area, b.y, b.x))
    return blobs


def _open(mask: np.ndarray, width: int, height: int) -> np.ndarray:
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (max(1, width), max(1, height)))
    return cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)


def _landmark(kind: LandmarkKind, blob: Blob) -> Landmark:
    return Landmark.from_box(kind, blob.x, blob.y, blob.w, blob.h)


class LandmarkDetector:
    """
    Blob-based detection of the ball, goal posts, crossbars and center cross.

    At most one landmark is reported per kind. A lone goal post whose side
    cannot be told from a crossbar is reported with the goal's generic post
    kind instead of a guessed left/right identity.
    """

    def __init__(self, config: Optional[LandmarkConfig] = None):
        self.config = config or LandmarkConfig()

    def detect(self, classified: np.ndarray, debug: Optional[np.ndarray] = None) -> dict[LandmarkKind, Landmark]:
        found: dict[LandmarkKind, Landmark] = {}

        ball = self.find_ball(classified)
        if ball is not None:
            found[ball.kind] = ball

        for goal in GOALS:
            found.update(self.find_goal(classified, goal))

        cross = self.find_center_cross(classified)
        if cross is not None:
            found[cross.kind] = cross

        if debug is not None:
            for lm in found.values():
                color = ColorClass.RED if lm.kind == LandmarkKind.BALL else ColorClass.NAVY
                cv2.rectangle(
                    debug,
                    lm.left_top,
                    (lm.right_bottom[0] - 1, lm.right_bottom[1] - 1),
                    int(color),
                    1,
                )
        return found

    def find_ball(self, classified: np.ndarray) -> Optional[Landmark]:
        blobs = [b for b in _blobs(_mask(classified, BALL_COLORS)) if b.area >= self.config.min_ball_area]
        if not blobs:
            return None
        best = blobs[0]
        ball = _landmark(LandmarkKind.BALL, best)
        ball.center = (best.x + best.w / 2.0, best.y + best.h / 2.0)
        ball.radius = max(best.w, best.h) / 2.0
        return ball

    def find_goal(self, classified: np.ndarray, goal: GoalSpec) -> dict[LandmarkKind, Landmark]:
        cfg = self.config
        mask = _mask(classified, goal.colors)
        if not mask.any():
            return {}

        vertical = _open(mask, 1, cfg.post_kernel)
        posts = [
            b
            for b in _blobs(vertical)
            if b.area >= cfg.min_post_area
            and b.h >= cfg.min_post_height
            and b.h >= cfg.post_aspect * b.w
        ][:2]

        horizontal = _open(mask, cfg.crossbar_kernel, 1)
        horizontal[vertical > 0] = 0
        bars = [
            b
            for b in _blobs(horizontal)
            if b.w >= cfg.min_crossbar_width and b.w >= cfg.crossbar_aspect * b.h
        ]
        crossbar = bars[0] if bars else None

        out: dict[LandmarkKind, Landmark] = {}
        if crossbar is not None:
            out[goal.crossbar] = _landmark(goal.crossbar, crossbar)

        if len(posts) == 2:
            left, right = sorted(posts, key=lambda b: b.x)
            out[goal.left] = _landmark(goal.left, left)
            out[goal.right] = _landmark(goal.right, right)
        elif len(posts) == 1:
            post = posts[0]
            possible = {goal.left, goal.right}
            if crossbar is not None:
                possible = {goal.left} if post.center_x < crossbar.center_x else {goal.right}
            kind = possible.pop() if len(possible) == 1 else goal.generic
            out[kind] = _landmark(kind, post)
        return out

    def find_center_cross(self, classified: np.ndarray) -> Optional[Landmark]:
        cfg = self.config
        height, width = classified.shape
        for b in _blobs(_mask(classified, (ColorClass.WHITE,))):
            if not (cfg.min_cross_area <= b.area <= cfg.max_cross_area):
                continue
            if not (0.5 <= b.w / b.h <= 2.0):
                continue
            fill = b.area / float(b.w * b.h)
            if not (cfg.cross_fill_min <= fill <= cfg.cross_fill_max):
                continue

            x0, y0 = max(b.x - 2, 0), max(b.y - 2, 0)
            x1, y1 = min(b.x + b.w + 2, width), min(b.y + b.h + 2, height)
            region = classified[y0:y1, x0:x1]
            inner = classified[b.y:b.y + b.h, b.x:b.x + b.w]
            ring = region.size - inner.size
            if ring == 0:
                continue
            green = int(np.count_nonzero(region == ColorClass.GREEN)) - int(
                np.count_nonzero(inner == ColorClass.GREEN)
            )
            if green / float(ring) >= cfg.cross_green_ratio:
                return _landmark(LandmarkKind.CENTER_CROSS, b)
        return None
