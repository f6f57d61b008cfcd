from dataclasses import dataclass
import numpy as np


@dataclass
class AgentState:
    id: int
    pos: np.ndarray      # shape (2,)
    speed: float         # m/s
    radius: float        # follower offset radius
    debug: str = ""
    alive: bool = True

    def clone(self) -> "AgentState":
        return AgentState(
            id=self.id,
            pos=self.pos.copy(),
            speed=self.speed,
            radius=self.radius,
            debug=self.debug,
            alive=self.alive,
        )


@dataclass
class SwarmState:
    agents: dict[int, AgentState]
    t: float
