from .state import AgentState
from .memory import AgentContext, RoundMemory
from ..policies.base import Policy


class Agent:
    def __init__(self, state: AgentState, policy: Policy, start_time: float = 0.0):
        self.state = state
        self.policy = policy
        self.start_time = start_time
        self.memory = RoundMemory(state.id)

    def step(self, space, directory, rng, period: float):
        """
        Single-threaded, no locks. Runs the policy once and commits its round state.
        """
        ctx = AgentContext(self.state, self.memory, space, directory, rng=rng, period=period)
        result = self.policy.act(ctx)
        self.memory.commit()
        return result
