"""
Group random walk over a street map.

Leaders wander between random waypoints, keeping a waypoint until it is within one
round of travel. Followers chase their leader's position plus a random offset drawn
once in their first round. Both move through ``reach_on_streets``, which routes around
obstacles and stays put when no usable route exists.
"""

import logging

import numpy as np

from ..core.groups import GROUP_SLOT, is_leader, leader_id
from .base import Policy

logger = logging.getLogger(__name__)


def _fmt(p) -> str:
    return f"({float(p[0]):.2f}, {float(p[1]):.2f})"


class GroupWalkPolicy(Policy):
    def __init__(self, bounds=(1200, 800), group_slot: int = GROUP_SLOT):
        self.low = np.zeros(2)
        self.high = np.array(bounds, dtype=float)
        self.group_slot = group_slot

    def in_bounds(self, p) -> bool:
        return bool(np.all(p >= self.low) and np.all(p <= self.high))

    def reach_on_streets(self, ctx, target, max_v: float, period: float) -> float:
        """
        Move towards ``target`` along the street map by at most ``max_v * period``.
        Returns the distance left to the target afterwards, or 0 when the target was
        rejected (no route, or outside the bounds) and the agent stayed put.
        """
        target = np.asarray(target, dtype=float)
        space = ctx.space
        pos = ctx.position
        goal = space.nearest_free_point(target)
        t = space.plan_route(pos, goal)
        ctx.debug = (
            f"sp: {_fmt(space.nearest_free_point(pos))} ob: {_fmt(space.nearest_obstacle(pos))} "
            f"target: {_fmt(target)} path: {_fmt(t)}"
        )
        rejected = False
        if np.isnan(t[0]) or np.isnan(t[1]):
            t = pos
            rejected = True
        if not self.in_bounds(target):
            t = pos
            rejected = True
        ctx.position = space.advance_position(pos, t, max_v * period)
        if rejected:
            logger.debug("agent %d: target %s rejected, staying at %s", ctx.uid, _fmt(target), _fmt(pos))
            return 0.0
        return float(np.linalg.norm(goal - ctx.position))

    def lead(self, ctx, first_round: bool) -> np.ndarray:
        if first_round:
            ctx.position = ctx.space.nearest_free_point(ctx.position)
        max_v = ctx.speed
        period = ctx.period
        candidate = ctx.random_rectangle(self.low, self.high)

        def commit(current):
            dist = self.reach_on_streets(ctx, current, max_v, period)
            if dist > max_v * period:
                return current
            logger.debug("leader %d: new waypoint %s", ctx.uid, _fmt(candidate))
            return candidate

        return ctx.old_update("target", candidate, commit)

    def follow(self, ctx, first_round: bool) -> np.ndarray:
        r = ctx.radius
        offset = ctx.constant("offset", ctx.random_rectangle([-r, -r], [r, r]))
        target = offset + ctx.lookup_position(leader_id(ctx.uid, self.group_slot))
        if first_round:
            ctx.position = ctx.space.nearest_free_point(target)
        else:
            self.reach_on_streets(ctx, target, ctx.speed, ctx.period)
        return target

    def act(self, ctx):
        first_round = ctx.old("first_round", True, False)
        if is_leader(ctx.uid, self.group_slot):
            return self.lead(ctx, first_round)
        return self.follow(ctx, first_round)


class ScopedPolicy(Policy):
    """Runs another policy under a fixed switcher key, isolating its round state."""

    def __init__(self, policy: Policy, key):
        self.policy = policy
        self.key = key

    def act(self, ctx):
        return ctx.switcher(self.key, lambda: self.policy.act(ctx))
