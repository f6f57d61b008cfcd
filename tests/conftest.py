import math

import numpy as np
import pytest

from groupwalk.core.env import SpatialIndex
from groupwalk.core.memory import AgentContext, RoundMemory
from groupwalk.core.state import AgentState


class OpenPlane(SpatialIndex):
    """Obstacle-free space: every point is free and every route is a straight line."""

    def __init__(self, blocked_route: bool = False):
        self.blocked_route = blocked_route

    def nearest_free_point(self, p):
        return np.asarray(p, dtype=float).copy()

    def nearest_obstacle(self, p):
        return np.array([math.nan, math.nan])

    def plan_route(self, src, dst):
        if self.blocked_route:
            return np.array([math.nan, math.nan])
        return np.asarray(dst, dtype=float).copy()

    def advance_position(self, current, waypoint, max_distance):
        current = np.asarray(current, dtype=float)
        delta = np.asarray(waypoint, dtype=float) - current
        dist = float(np.linalg.norm(delta))
        if dist <= max_distance:
            return np.asarray(waypoint, dtype=float).copy()
        return current + delta * (max_distance / dist)


class ScriptedRng:
    """Returns queued points from ``uniform``; falls back to ``low`` once exhausted."""

    def __init__(self, points=()):
        self.points = [np.array(p, dtype=float) for p in points]
        self.calls = 0

    def uniform(self, low, high):
        self.calls += 1
        if self.points:
            return self.points.pop(0)
        return np.asarray(low, dtype=float).copy()


class StaticDirectory:
    def __init__(self, positions):
        self.positions = {k: np.array(v, dtype=float) for k, v in positions.items()}

    def lookup_position(self, uid):
        return self.positions[uid].copy()


def make_state(uid, pos, speed=10.0, radius=0.0):
    return AgentState(id=uid, pos=np.array(pos, dtype=float), speed=speed, radius=radius)


def make_ctx(state, space=None, directory=None, rng=None, memory=None, period=1.0):
    return AgentContext(
        state,
        memory if memory is not None else RoundMemory(state.id),
        space if space is not None else OpenPlane(),
        directory if directory is not None else StaticDirectory({}),
        rng=rng if rng is not None else ScriptedRng(),
        period=period,
    )


@pytest.fixture
def plane():
    return OpenPlane()
