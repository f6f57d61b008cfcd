import heapq
import logging
import math
from abc import ABC, abstractmethod

import numpy as np

logger = logging.getLogger(__name__)

NAN_POINT = (math.nan, math.nan)


class Obstacle:
    def __init__(self, center, radius):
        self.center = np.array(center, dtype=float)
        self.radius = float(radius)

    def contains(self, points):
        points = np.atleast_2d(points)
        return np.linalg.norm(points - self.center, axis=1) < self.radius

    def intersects_segment(self, a, b) -> bool:
        d = b - a
        dd = float(d @ d)
        t = 0.0 if dd == 0 else min(max(float((self.center - a) @ d) / dd, 0.0), 1.0)
        return float(np.linalg.norm(a + t * d - self.center)) < self.radius

    def closest_boundary_point(self, p):
        d = p - self.center
        n = np.linalg.norm(d)
        if n == 0:
            return self.center + np.array([self.radius, 0.0])
        return self.center + d / n * self.radius


class Block:
    """Axis-aligned rectangular obstacle (a building between streets)."""

    def __init__(self, low, high):
        self.low = np.minimum(np.array(low, dtype=float), np.array(high, dtype=float))
        self.high = np.maximum(np.array(low, dtype=float), np.array(high, dtype=float))

    @property
    def center(self):
        return (self.low + self.high) / 2.0

    def contains(self, points):
        points = np.atleast_2d(points)
        return np.all((points > self.low) & (points < self.high), axis=1)

    def intersects_segment(self, a, b) -> bool:
        # Liang-Barsky clip against the closed box, then test the clipped piece
        # against the open interior so segments running along an edge stay free.
        d = b - a
        t0, t1 = 0.0, 1.0
        for axis in (0, 1):
            if d[axis] == 0:
                if a[axis] < self.low[axis] or a[axis] > self.high[axis]:
                    return False
                continue
            ta = (self.low[axis] - a[axis]) / d[axis]
            tb = (self.high[axis] - a[axis]) / d[axis]
            t0 = max(t0, min(ta, tb))
            t1 = min(t1, max(ta, tb))
            if t0 > t1:
                return False
        return bool(self.contains(a + (t0 + t1) / 2.0 * d)[0])

    def closest_boundary_point(self, p):
        q = np.clip(p, self.low, self.high)
        if not self.contains(p)[0]:
            return q
        # inside: push out through the nearest face
        gaps = np.array([p[0] - self.low[0], self.high[0] - p[0], p[1] - self.low[1], self.high[1] - p[1]])
        face = int(np.argmin(gaps))
        q = p.copy()
        if face == 0:
            q[0] = self.low[0]
        elif face == 1:
            q[0] = self.high[0]
        elif face == 2:
            q[1] = self.low[1]
        else:
            q[1] = self.high[1]
        return q


class SpatialIndex(ABC):
    """Read-only spatial queries a policy may issue."""

    @abstractmethod
    def nearest_free_point(self, p) -> np.ndarray:
        ...

    @abstractmethod
    def nearest_obstacle(self, p) -> np.ndarray:
        ...

    @abstractmethod
    def plan_route(self, src, dst) -> np.ndarray:
        """Next waypoint from ``src`` towards ``dst``; NaN components when unreachable."""
        ...

    @abstractmethod
    def advance_position(self, current, waypoint, max_distance: float) -> np.ndarray:
        ...


class StreetMap(SpatialIndex):
    """
    Occupancy grid over [0, X_MAX] x [0, Y_MAX].
    A point is free when it is inside the bounds and outside every obstacle;
    routes are planned with A* over the 8-connected grid of free cell centres.
    """

    def __init__(self, bounds=(1200, 800), obstacles=None, cell_size: float = 10.0):
        self.bounds = (float(bounds[0]), float(bounds[1]))
        self.obstacles = list(obstacles or [])
        self.cell_size = float(cell_size)
        if self.cell_size <= 0:
            raise ValueError(f"cell size must be positive, got {cell_size}")
        self.nx = max(1, int(math.ceil(self.bounds[0] / self.cell_size)))
        self.ny = max(1, int(math.ceil(self.bounds[1] / self.cell_size)))
        ii, jj = np.meshgrid(np.arange(self.nx), np.arange(self.ny), indexing="ij")
        centers = np.stack([(ii + 0.5) * self.cell_size, (jj + 0.5) * self.cell_size], axis=-1)
        centers = np.minimum(centers, self.bounds)
        self.centers = centers
        self.free = self._free_mask(centers.reshape(-1, 2)).reshape(self.nx, self.ny)
        self._free_cells = np.argwhere(self.free)
        self._free_centers = centers[self.free]
        logger.debug(
            "street map %dx%d cells, %d free, %d obstacles",
            self.nx, self.ny, len(self._free_cells), len(self.obstacles),
        )

    # -- point queries -------------------------------------------------------

    def in_bounds(self, p) -> bool:
        x, y = float(p[0]), float(p[1])
        return 0.0 <= x <= self.bounds[0] and 0.0 <= y <= self.bounds[1]

    def _free_mask(self, points):
        points = np.atleast_2d(np.asarray(points, dtype=float))
        mask = np.all(np.isfinite(points), axis=1)
        mask &= (points[:, 0] >= 0) & (points[:, 0] <= self.bounds[0])
        mask &= (points[:, 1] >= 0) & (points[:, 1] <= self.bounds[1])
        for obs in self.obstacles:
            mask &= ~obs.contains(points)
        return mask

    def is_free(self, p) -> bool:
        return bool(self._free_mask(p)[0])

    def nearest_free_point(self, p) -> np.ndarray:
        p = np.asarray(p, dtype=float)
        if self.is_free(p) or len(self._free_centers) == 0:
            return p.copy()
        d2 = ((self._free_centers - p) ** 2).sum(axis=1)
        return self._free_centers[int(np.argmin(d2))].copy()

    def nearest_obstacle(self, p) -> np.ndarray:
        p = np.asarray(p, dtype=float)
        best, best_d = np.array(NAN_POINT), math.inf
        for obs in self.obstacles:
            q = obs.closest_boundary_point(p)
            d = float(np.linalg.norm(q - p))
            if d < best_d:
                best, best_d = q, d
        return best

    def segment_free(self, a, b) -> bool:
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        # the bounds are convex, so checking the endpoints covers the whole segment
        if not (self.in_bounds(a) and self.in_bounds(b)):
            return False
        return not any(obs.intersects_segment(a, b) for obs in self.obstacles)

    # -- routing -------------------------------------------------------------

    def _cell_of(self, p):
        i = min(max(int(p[0] // self.cell_size), 0), self.nx - 1)
        j = min(max(int(p[1] // self.cell_size), 0), self.ny - 1)
        return i, j

    def _nearest_free_cell(self, p):
        cell = self._cell_of(p)
        if self.free[cell]:
            return cell
        d2 = ((self._free_centers - p) ** 2).sum(axis=1)
        i, j = self._free_cells[int(np.argmin(d2))]
        return int(i), int(j)

    def _neighbors(self, cell):
        i, j = cell
        for di in (-1, 0, 1):
            for dj in (-1, 0, 1):
                if di == 0 and dj == 0:
                    continue
                ni, nj = i + di, j + dj
                if not (0 <= ni < self.nx and 0 <= nj < self.ny) or not self.free[ni, nj]:
                    continue
                # no corner cutting
                if di and dj and not (self.free[i + di, j] and self.free[i, j + dj]):
                    continue
                yield (ni, nj), math.hypot(di, dj)

    def _astar(self, start, goal):
        def h(c):
            return math.hypot(c[0] - goal[0], c[1] - goal[1])

        frontier = [(h(start), 0.0, start)]
        came_from = {start: None}
        cost = {start: 0.0}
        while frontier:
            _, g, cell = heapq.heappop(frontier)
            if cell == goal:
                path = []
                while cell is not None:
                    path.append(cell)
                    cell = came_from[cell]
                return path[::-1]
            if g > cost[cell]:
                continue
            for nxt, step in self._neighbors(cell):
                ng = g + step
                if ng < cost.get(nxt, math.inf):
                    cost[nxt] = ng
                    came_from[nxt] = cell
                    heapq.heappush(frontier, (ng + h(nxt), ng, nxt))
        return None

    def plan_route(self, src, dst) -> np.ndarray:
        src = np.asarray(src, dtype=float)
        dst = np.asarray(dst, dtype=float)
        if not (np.all(np.isfinite(src)) and np.all(np.isfinite(dst))) or len(self._free_cells) == 0:
            return np.array(NAN_POINT)
        if self.segment_free(src, dst):
            return dst.copy()
        path = self._astar(self._nearest_free_cell(src), self._nearest_free_cell(dst))
        if path is None:
            return np.array(NAN_POINT)
        candidates = [dst] + [self.centers[c] for c in reversed(path)]
        for w in candidates:
            # a waypoint on top of src makes no progress
            if np.allclose(w, src):
                continue
            if self.segment_free(src, w):
                return np.array(w, dtype=float)
        return np.array(NAN_POINT)

    def advance_position(self, current, waypoint, max_distance: float) -> np.ndarray:
        current = np.asarray(current, dtype=float)
        delta = np.asarray(waypoint, dtype=float) - current
        dist = float(np.linalg.norm(delta))
        if dist <= max_distance:
            return np.asarray(waypoint, dtype=float).copy()
        return current + delta * (max_distance / dist)
