import json
from pathlib import Path
from ..core.state import SwarmState
from ..core.groups import GROUP_SLOT, leader_id


class SwarmLogger:
    def __init__(self, path: str | Path, group_slot: int = GROUP_SLOT):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.group_slot = group_slot
        self.records = []

    def log_state(self, state: SwarmState, spread=None, coverage=None, cohesion=None):
        snapshot = {
            "t": state.t,
            "agents": {
                str(aid): {
                    "pos": st.pos.tolist(),
                    "leader": leader_id(aid, self.group_slot),
                    "debug": st.debug,
                }
                for aid, st in state.agents.items()
            },
        }
        if spread is not None:
            snapshot["spread"] = {str(g): d for g, d in spread.items()}
        if coverage is not None:
            snapshot["coverage"] = coverage
        if cohesion is not None:
            snapshot["cohesion"] = cohesion
        self.records.append(snapshot)

    def flush(self):
        with self.path.open("w") as f:
            json.dump(self.records, f, indent=2)
