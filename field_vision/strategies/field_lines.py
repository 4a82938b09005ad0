from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import cv2
import numpy as np

from ..config import LineConfig
from ..fv_types import (
    ColorClass,
    CornerShape,
    Estimate,
    Horizon,
    LinePoint,
    ScanDirection,
    VisualCorner,
    VisualLine,
)

Estimator = Callable[[float, float, float], Estimate]

LINE_MARK = int(ColorClass.ORANGE_YELLOW)
UNUSED_MARK = int(ColorClass.RED)
CORNER_MARK = int(ColorClass.BLUE_GREEN)


@dataclass
class LineDetection:
    lines: list[VisualLine] = field(default_factory=list)
    unused_points: list[LinePoint] = field(default_factory=list)
    corners: list[VisualCorner] = field(default_factory=list)


def _runs(mask: np.ndarray) -> list[tuple[int, int]]:
    """(start, stop) of every True run in a 1-D boolean array."""
    padded = np.concatenate(([False], mask, [False]))
    edges = np.flatnonzero(padded[1:] != padded[:-1])
    return [(int(a), int(b)) for a, b in zip(edges[::2], edges[1::2])]


@dataclass(frozen=True)
class _Fit:
    """Least-squares line through a point group and the group's extent along it."""

    ox: float
    oy: float
    dx: float
    dy: float
    lo: float
    hi: float
    # bounding box of the fitted segment: min x, min y, max x, max y
    box: tuple[float, float, float, float]

    @classmethod
    def of(cls, points: Sequence[LinePoint]) -> "_Fit":
        pts = np.array([(p.x, p.y) for p in points], dtype=np.float32)
        dx, dy, ox, oy = (float(v) for v in cv2.fitLine(pts, cv2.DIST_L2, 0, 0.01, 0.01).ravel())
        ts = (pts[:, 0] - ox) * dx + (pts[:, 1] - oy) * dy
        lo, hi = float(ts.min()), float(ts.max())
        xs = (ox + lo * dx, ox + hi * dx)
        ys = (oy + lo * dy, oy + hi * dy)
        return cls(ox, oy, dx, dy, lo, hi, (min(xs), min(ys), max(xs), max(ys)))

    def along(self, x: float, y: float) -> float:
        return (x - self.ox) * self.dx + (y - self.oy) * self.dy

    def offset(self, x: float, y: float) -> float:
        return abs(self.dx * (y - self.oy) - self.dy * (x - self.ox))

    def end(self, t: float) -> tuple[float, float]:
        return self.ox + t * self.dx, self.oy + t * self.dy

    def sin_to(self, other: "_Fit") -> float:
        return abs(self.dx * other.dy - self.dy * other.dx)

    def near(self, other: "_Fit", margin: float) -> bool:
        ax0, ay0, ax1, ay1 = self.box
        bx0, by0, bx1, by1 = other.box
        return bx0 - ax1 <= margin and ax0 - bx1 <= margin and by0 - ay1 <= margin and ay0 - by1 <= margin


class LineDetector:
    """
    Finds field lines, corners and unused line points in a classified map.

    Every scanned point ends up either in exactly one line or in the unused
    list. Output order follows scan order for identical input.
    """

    def __init__(self, estimator: Estimator, config: Optional[LineConfig] = None):
        self.estimator = estimator
        self.config = config or LineConfig()

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------
    def scan(self, classified: np.ndarray, horizon: Horizon) -> list[LinePoint]:
        cfg = self.config
        height, width = classified.shape
        top = max(0, int(horizon.vision_horizon))
        if top >= height:
            return []

        white = classified == ColorClass.WHITE
        spacing = max(1, cfg.scan_spacing)
        offset = spacing // 2
        points: list[LinePoint] = []

        # vertical scans find lines crossing the column
        for x in range(offset, width, spacing):
            for start, stop in reversed(_runs(white[top:, x])):
                run = stop - start
                if cfg.min_line_width <= run <= cfg.max_line_width:
                    y = top + (start + stop - 1) / 2.0
                    points.append(LinePoint(float(x), y, float(run), ScanDirection.VERTICAL))

        # horizontal scans, bottom row first
        for y in range(height - 1 - offset, top - 1, -spacing):
            for start, stop in _runs(white[y, :]):
                run = stop - start
                if cfg.min_line_width <= run <= cfg.max_line_width:
                    x = (start + stop - 1) / 2.0
                    points.append(LinePoint(x, float(y), float(run), ScanDirection.HORIZONTAL))

        return points

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------
    def _follows(self, group: list[LinePoint], p: LinePoint) -> Optional[float]:
        """Distance from the group's last point if p can extend it, else None."""
        last = group[-1]
        if p.found_with_scan == ScanDirection.VERTICAL and p.x <= last.x:
            return None
        if p.found_with_scan == ScanDirection.HORIZONTAL and p.y >= last.y:
            return None
        max_gap = self.config.max_point_gap
        if abs(p.x - last.x) > max_gap or abs(p.y - last.y) > max_gap:
            return None
        gap = math.hypot(p.x - last.x, p.y - last.y)
        if gap > max_gap:
            return None
        if len(group) >= 2:
            first = group[0]
            dx, dy = last.x - first.x, last.y - first.y
            norm = math.hypot(dx, dy)
            if norm > 0 and abs(dx * (p.y - first.y) - dy * (p.x - first.x)) / norm > self.config.max_point_offset:
                return None
        return gap

    def group(self, points: Sequence[LinePoint]) -> tuple[list[list[LinePoint]], list[LinePoint]]:
        """
        Greedy grouping of points in scan order.

        A point joins the nearest open group of its own scan direction.
        Groups fall out of the open set once the scan has moved more than
        ``max_point_gap`` past their last point.
        """
        max_gap = self.config.max_point_gap
        groups: list[list[LinePoint]] = []
        owner: list[int] = []
        open_groups: dict[ScanDirection, list[int]] = {d: [] for d in ScanDirection}

        for p in points:
            candidates = open_groups[p.found_with_scan]
            if p.found_with_scan == ScanDirection.VERTICAL:
                candidates[:] = [gi for gi in candidates if p.x - groups[gi][-1].x <= max_gap]
            else:
                candidates[:] = [gi for gi in candidates if groups[gi][-1].y - p.y <= max_gap]

            best, best_gap = -1, None
            for gi in candidates:
                gap = self._follows(groups[gi], p)
                if gap is not None and (best_gap is None or gap < best_gap):
                    best, best_gap = gi, gap
            if best < 0:
                groups.append([p])
                best = len(groups) - 1
                candidates.append(best)
            else:
                groups[best].append(p)
            owner.append(best)

        keep = [len(g) >= self.config.min_points_per_line for g in groups]
        lines = [g for g, k in zip(groups, keep) if k]
        unused = [p for p, gi in zip(points, owner) if not keep[gi]]
        return lines, unused

    def _mergeable(self, a: _Fit, b: _Fit) -> bool:
        cfg = self.config
        if not a.near(b, 2 * cfg.max_point_gap + cfg.merge_distance):
            return False
        if a.sin_to(b) > math.sin(math.radians(cfg.merge_angle_deg)):
            return False
        (x0, y0), (x1, y1) = b.end(b.lo), b.end(b.hi)
        if max(a.offset(x0, y0), a.offset(x1, y1)) > cfg.merge_distance:
            return False
        t0, t1 = a.along(x0, y0), a.along(x1, y1)
        return max(a.lo, min(t0, t1)) - min(a.hi, max(t0, t1)) <= 2 * cfg.max_point_gap

    def merge(self, groups: list[list[LinePoint]]) -> list[list[LinePoint]]:
        """Collinear merge; a group absorbs every later group that continues it."""
        merged = [list(g) for g in groups]
        fits = [_Fit.of(g) for g in merged]
        alive = [True] * len(merged)
        changed = True
        while changed:
            changed = False
            for i in range(len(merged)):
                if not alive[i]:
                    continue
                for j in range(i + 1, len(merged)):
                    if alive[j] and self._mergeable(fits[i], fits[j]):
                        merged[i].extend(merged[j])
                        alive[j] = False
                        fits[i] = _Fit.of(merged[i])
                        changed = True
        return [g for g, a in zip(merged, alive) if a]

    # ------------------------------------------------------------------
    # Corners
    # ------------------------------------------------------------------
    def find_corners(self, lines: Sequence[VisualLine], shape: tuple[int, int]) -> list[VisualCorner]:
        cfg = self.config
        height, width = shape
        fits = [_Fit.of(line.points) for line in lines]
        min_sin = math.sin(math.radians(cfg.min_corner_angle_deg))
        tol = cfg.corner_tolerance

        corners: list[VisualCorner] = []
        for i in range(len(lines)):
            a = fits[i]
            for j in range(i + 1, len(lines)):
                b = fits[j]
                # the crossing lies within tol of both segments
                if not a.near(b, 2 * tol):
                    continue
                denom = a.dx * b.dy - a.dy * b.dx
                if abs(denom) < min_sin:
                    continue
                t = ((b.ox - a.ox) * b.dy - (b.oy - a.oy) * b.dx) / denom
                ix, iy = a.end(t)
                if not (-tol <= ix < width + tol and -tol <= iy < height + tol):
                    continue

                near_end = []
                for f in (a, b):
                    s = f.along(ix, iy)
                    if max(f.lo - s, s - f.hi) > tol:
                        break
                    near_end.append(min(abs(s - f.lo), abs(s - f.hi)) <= cfg.corner_end_tolerance)
                else:
                    if all(near_end):
                        shape_kind = CornerShape.L
                    elif any(near_end):
                        shape_kind = CornerShape.T
                    else:
                        shape_kind = CornerShape.X

                    est = self.estimator(ix, iy, 0.0)
                    if est.valid:
                        corners.append(VisualCorner(ix, iy, est.distance, est.bearing, shape_kind, (i, j)))
        return corners

    # ------------------------------------------------------------------
    def detect_lines(
        self,
        classified: np.ndarray,
        horizon: Horizon,
        debug: Optional[np.ndarray] = None,
    ) -> LineDetection:
        points = self.scan(classified, horizon)
        groups, unused = self.group(points)
        lines = [VisualLine.from_points(g) for g in self.merge(groups)]
        corners = self.find_corners(lines, classified.shape)

        if debug is not None:
            for line in lines:
                cv2.line(
                    debug,
                    (int(line.start.x), int(line.start.y)),
                    (int(line.end.x), int(line.end.y)),
                    LINE_MARK,
                    1,
                )
            for p in unused:
                debug[int(p.y), int(p.x)] = UNUSED_MARK
            for c in corners:
                cx, cy = int(round(c.x)), int(round(c.y))
                cv2.rectangle(debug, (cx - 1, cy - 1), (cx + 1, cy + 1), CORNER_MARK, 1)

        return LineDetection(lines, unused, corners)
