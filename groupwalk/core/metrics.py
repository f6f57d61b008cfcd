import numpy as np
from .state import SwarmState
from .groups import GROUP_SLOT, group_of, is_leader, leader_id


def coverage_extent(state: SwarmState) -> float:
    """
    Area of the axis-aligned box spanned by every agent; 0 with fewer than two distinct positions.
    """
    if not state.agents:
        return 0.0
    positions = np.array([a.pos for a in state.agents.values()])
    return float(np.prod(np.ptp(positions, axis=0)))


def mean_pairwise_distance(state: SwarmState) -> float:
    """
    Swarm-wide cohesion: mean distance over all agent pairs, across groups.
    """
    n = len(state.agents)
    if n < 2:
        return 0.0
    positions = np.array([a.pos for a in state.agents.values()])
    dists = np.linalg.norm(positions[:, None, :] - positions[None, :, :], axis=-1)
    # diagonal is zero, each pair counted twice
    return float(dists.sum() / (n * (n - 1)))


def group_spread(state: SwarmState, group_slot: int = GROUP_SLOT) -> dict[int, float]:
    """
    Mean distance of each group's followers to their leader.
    Groups whose leader is absent, or that have no followers, are skipped.
    """
    dists: dict[int, list[float]] = {}
    for aid, st in state.agents.items():
        if is_leader(aid, group_slot):
            continue
        leader = state.agents.get(leader_id(aid, group_slot))
        if leader is None:
            continue
        dists.setdefault(group_of(aid, group_slot), []).append(float(np.linalg.norm(st.pos - leader.pos)))
    return {g: float(np.mean(ds)) for g, ds in dists.items()}


def obstacle_violations(state: SwarmState, space) -> int:
    """
    Count agents standing outside free space.
    """
    return sum(0 if space.is_free(st.pos) else 1 for st in state.agents.values())
