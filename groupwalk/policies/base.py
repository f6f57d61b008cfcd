from abc import ABC, abstractmethod


class Policy(ABC):
    @abstractmethod
    def act(self, ctx):
        """Run one round of the local program for the agent behind ``ctx``."""
        ...
