import logging

import numpy as np

from .state import AgentState

logger = logging.getLogger(__name__)

GROUP_SLOT = 100


def leader_id(uid: int, group_slot: int = GROUP_SLOT) -> int:
    return uid - (uid % group_slot)


def is_leader(uid: int, group_slot: int = GROUP_SLOT) -> bool:
    return uid == leader_id(uid, group_slot)


def group_of(uid: int, group_slot: int = GROUP_SLOT) -> int:
    return uid // group_slot


def kmh_to_ms(speed: float) -> float:
    return speed / 3.6


def spawn_group(
    group_id: int,
    group_size: int,
    group_radius: float,
    group_speed: float = 0,
    start_time: float = 0,
    bounds=(1200, 800),
    rng=None,
    group_slot: int = GROUP_SLOT,
):
    """
    Create the members of one group.

    Identifiers are ``group_slot * group_id, +1, ...`` so the first member is the leader.
    Positions are uniform in ``[0, X_MAX] x [0, Y_MAX]``; ``group_speed`` is in km/h.
    Returns a list of ``(AgentState, start_time)`` pairs.
    """
    if group_id < 0:
        raise ValueError(f"group id must be non-negative, got {group_id}")
    if not 0 < group_size < group_slot:
        raise ValueError(f"group size must lie in [1, {group_slot - 1}], got {group_size}")
    if group_radius < 0:
        raise ValueError(f"group radius must be non-negative, got {group_radius}")
    rng = rng or np.random.default_rng()
    x_max, y_max = bounds
    speed = kmh_to_ms(group_speed)
    base = group_slot * group_id
    members = []
    for k in range(group_size):
        st = AgentState(
            id=base + k,
            pos=rng.uniform([0.0, 0.0], [x_max, y_max]),
            speed=speed,
            radius=float(group_radius),
        )
        members.append((st, start_time))
    logger.debug(
        "group %d: %d agents, radius=%.1f, speed=%.2f m/s, start=%.1f",
        group_id, group_size, group_radius, speed, start_time,
    )
    return members
