"""
Round-carried agent state and the per-round context handed to policies.

A policy declares its persistent values by name (``ctx.old("first_round", True, False)``).
Each value is stored under ``(uid, scope path, name)``; the scope path is the stack of
keys pushed by ``switcher``, so the same program can run several times in one round
without its values colliding.
"""

import numpy as np


class StateCollisionError(RuntimeError):
    """The same state slot was written twice in one round."""


class RoundMemory:
    def __init__(self, uid: int):
        self.uid = uid
        self.previous: dict = {}
        self.current: dict = {}

    def key(self, scope: tuple, name: str):
        return (self.uid, scope, name)

    def read(self, key, initial):
        return self.previous.get(key, initial)

    def write(self, key, value):
        if key in self.current:
            raise StateCollisionError(
                f"agent {key[0]} wrote {key[2]!r} twice in scope {key[1]!r}; "
                "run repeated invocations under distinct switcher keys"
            )
        self.current[key] = value

    def commit(self):
        # slots not refreshed this round are dropped
        self.previous = self.current
        self.current = {}

class AgentContext:
    def __init__(self, state, memory: RoundMemory, space, directory, rng=None, period: float = 1.0):
        self.state = state
        self.memory = memory
        self.space = space
        self.directory = directory
        self.rng = rng if rng is not None else np.random.default_rng()
        self.period = period
        self._scope: list = []

    @property
    def uid(self) -> int:
        return self.state.id

    @property
    def position(self) -> np.ndarray:
        return self.state.pos

    @position.setter
    def position(self, value):
        self.state.pos = np.asarray(value, dtype=float).copy()

    @property
    def speed(self) -> float:
        return self.state.speed

    @property
    def radius(self) -> float:
        return self.state.radius

    @property
    def debug(self) -> str:
        return self.state.debug

    @debug.setter
    def debug(self, value: str):
        self.state.debug = value

    @property
    def scope(self) -> tuple:
        return tuple(self._scope)

    def old(self, name: str, initial, value):
        """Return last round's value of ``name`` (``initial`` on the first round) and store ``value``."""
        key = self.memory.key(self.scope, name)
        prev = self.memory.read(key, initial)
        self.memory.write(key, value)
        return prev

    def old_update(self, name: str, initial, fn):
        """Store and return ``fn(previous)``, where previous defaults to ``initial``."""
        key = self.memory.key(self.scope, name)
        value = fn(self.memory.read(key, initial))
        self.memory.write(key, value)
        return value

    def constant(self, name: str, value):
        """Value of ``name`` fixed at its first round."""
        key = self.memory.key(self.scope, name)
        held = self.memory.read(key, value)
        self.memory.write(key, held)
        return held

    def random_rectangle(self, low, high) -> np.ndarray:
        return self.rng.uniform(np.asarray(low, dtype=float), np.asarray(high, dtype=float))

    def lookup_position(self, uid: int) -> np.ndarray:
        return self.directory.lookup_position(uid)

    def switcher(self, key, fn):
        """Run ``fn()`` with its persistent state scoped under ``key``."""
        self._scope.append(key)
        try:
            return fn()
        finally:
            self._scope.pop()
