import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
from ..core.env import Block, Obstacle
from ..core.groups import GROUP_SLOT, group_of, is_leader
from ..core.state import SwarmState


GROUP_COLORS = ["blue", "red", "purple", "orange", "teal", "brown", "magenta", "olive"]


class SwarmRenderer2D:
    def __init__(self, bounds, obstacles=None, group_slot: int = GROUP_SLOT):
        self.bounds = bounds
        self.obstacles = obstacles or []
        self.group_slot = group_slot
        self.fig, self.ax = plt.subplots(figsize=(9, 6))
        backend = plt.get_backend().lower()
        self._interactive = backend not in {"agg", "pdf", "svg"}
        if self._interactive:
            plt.ion()
        self.follower_scatters = {}
        self.leader_scatters = {}
        self.obstacle_patches = []
        self.ax.set_xlim(0, bounds[0])
        self.ax.set_ylim(0, bounds[1])
        self.ax.set_aspect("equal")
        self._draw_static()

    def _draw_static(self):
        for obs in self.obstacles:
            if isinstance(obs, Block):
                w, h = obs.high - obs.low
                patch = mpatches.Rectangle(obs.low, w, h, color="gray", alpha=0.35, zorder=1)
            elif isinstance(obs, Obstacle):
                patch = mpatches.Circle(obs.center[:2], obs.radius, color="gray", alpha=0.25, zorder=1)
            else:
                continue
            self.ax.add_patch(patch)
            self.obstacle_patches.append(patch)

    def _scatter(self, cache, group, positions, **kwargs):
        scat = cache.get(group)
        if scat is None:
            scat = self.ax.scatter(positions[:, 0], positions[:, 1], **kwargs)
            cache[group] = scat
        else:
            scat.set_offsets(positions[:, :2])
        return scat

    def render(self, swarm_state: SwarmState):
        followers, leaders = {}, {}
        for aid, a in swarm_state.agents.items():
            bucket = leaders if is_leader(aid, self.group_slot) else followers
            bucket.setdefault(group_of(aid, self.group_slot), []).append(a.pos)
        for group, pos_list in followers.items():
            color = GROUP_COLORS[group % len(GROUP_COLORS)]
            self._scatter(self.follower_scatters, group, np.array(pos_list), c=color, s=12, zorder=4, alpha=0.8)
        for group, pos_list in leaders.items():
            color = GROUP_COLORS[group % len(GROUP_COLORS)]
            self._scatter(
                self.leader_scatters, group, np.array(pos_list),
                c=color, s=60, marker="*", zorder=5, label=f"group {group}",
            )
        self.ax.set_title(f"t={swarm_state.t:.2f}")
        if self._interactive:
            plt.pause(0.001)
