import logging

import numpy as np

from .state import SwarmState
from .agent import Agent
from ..comms.directory import PositionDirectory

logger = logging.getLogger(__name__)


class Simulator:
    """
    Round engine. Each step activates agents whose start time has come, snapshots all
    active positions, and runs every active agent once against that snapshot, so
    followers always read their leader's round-start position.
    """

    def __init__(self, agents: list[Agent], space, period: float = 1.0, rng=None):
        self.pending = sorted(agents, key=lambda a: a.start_time)
        self.agents: dict[int, Agent] = {}
        self.space = space
        self.period = period
        self.rng = rng or np.random.default_rng()
        self.t = 0.0

    def _activate(self):
        while self.pending and self.pending[0].start_time <= self.t:
            agent = self.pending.pop(0)
            if agent.state.id in self.agents:
                raise ValueError(f"duplicate agent id {agent.state.id}")
            self.agents[agent.state.id] = agent
            logger.debug("t=%.1f spawned agent %d at %s", self.t, agent.state.id, agent.state.pos)

    def snapshot(self) -> SwarmState:
        return SwarmState(
            agents={i: a.state.clone() for i, a in self.agents.items()},
            t=self.t,
        )

    def step(self, return_logs: bool = False):
        self._activate()
        directory = PositionDirectory(self.snapshot())

        step_logs = {}
        for i in sorted(self.agents):
            agent = self.agents[i]
            if not agent.state.alive:
                continue
            target = agent.step(self.space, directory, self.rng, self.period)
            step_logs[i] = {"target": target, "debug": agent.state.debug}

        self.t += self.period
        state = self.snapshot()
        if return_logs:
            return state, step_logs
        return state

    def run(self, steps: int, callback=None):
        state = self.snapshot()
        for step in range(steps):
            state = self.step()
            if callback is not None:
                callback(step, state)
        return state
