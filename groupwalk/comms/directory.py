import numpy as np

from ..core.state import SwarmState


class PositionDirectory:
    """
    Read-only position lookup over a round-start snapshot.
    Every reader in a round sees the same positions, whatever order agents run in.
    """

    def __init__(self, snapshot: SwarmState):
        self._positions = {aid: st.pos.copy() for aid, st in snapshot.agents.items() if st.alive}

    def lookup_position(self, uid: int) -> np.ndarray:
        try:
            return self._positions[uid].copy()
        except KeyError:
            raise KeyError(f"no active agent with id {uid}") from None

    def __contains__(self, uid):
        return uid in self._positions

    def __len__(self):
        return len(self._positions)
