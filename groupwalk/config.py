import pathlib

import numpy as np
import yaml

from .core.agent import Agent
from .core.env import Block, Obstacle, StreetMap
from .core.groups import GROUP_SLOT, spawn_group
from .core.simulator import Simulator
from .policies.group_walk import GroupWalkPolicy


def _city_blocks():
    blocks = []
    for x0 in (60, 320, 580, 840):
        for y0 in (60, 300, 540):
            blocks.append({"low": [x0, y0], "high": [x0 + 200, y0 + 180]})
    return blocks


DEFAULT_CONFIG = {
    "period": 1.0,
    "steps": 500,
    "seed": None,
    "render_every": 2,
    "group_slot": GROUP_SLOT,
    "env": {
        "bounds": [1200, 800],
        "cell_size": 10.0,
        "obstacles": [
            {"center": [1120, 400], "radius": 40.0},
        ],
        "blocks": _city_blocks(),
    },
    "groups": [
        {"id": 0, "size": 10, "radius": 20, "speed": 36, "start_time": 0},
        {"id": 1, "size": 15, "radius": 30, "speed": 50, "start_time": 0},
        {"id": 2, "size": 5, "radius": 10, "speed": 20, "start_time": 10},
    ],
    "logging": {"level": "WARNING"},
}


def deep_update(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = deep_update(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: pathlib.Path | None) -> dict:
    if path is None:
        return deep_update(DEFAULT_CONFIG, {})
    cfg = yaml.safe_load(path.read_text())
    if cfg is None:
        return deep_update(DEFAULT_CONFIG, {})
    if not isinstance(cfg, dict):
        raise ValueError(f"{path}: expected a mapping at top level")
    if "inherits" in cfg:
        base_path = path.parent / cfg["inherits"]
        base_cfg = load_config(base_path)
        cfg = {k: v for k, v in cfg.items() if k != "inherits"}
        return deep_update(base_cfg, cfg)
    return deep_update(DEFAULT_CONFIG, cfg)


def build_env(cfg) -> StreetMap:
    env_cfg = cfg.get("env", {})
    bounds = env_cfg.get("bounds", [1200, 800])
    if len(bounds) != 2 or min(bounds) <= 0:
        raise ValueError(f"env.bounds must be [X_MAX, Y_MAX] with positive sides, got {bounds}")
    obstacles = [
        Obstacle(center=o["center"], radius=o.get("radius", 1.0))
        for o in env_cfg.get("obstacles", [])
    ]
    obstacles += [Block(low=b["low"], high=b["high"]) for b in env_cfg.get("blocks", [])]
    return StreetMap(bounds=bounds, obstacles=obstacles, cell_size=env_cfg.get("cell_size", 10.0))


def build_agents(cfg, policy, bounds, rng) -> list[Agent]:
    group_slot = cfg.get("group_slot", GROUP_SLOT)
    seen = set()
    agents = []
    for g in cfg.get("groups", []):
        gid = g["id"]
        if gid in seen:
            raise ValueError(f"group {gid} configured twice")
        seen.add(gid)
        members = spawn_group(
            group_id=gid,
            group_size=g["size"],
            group_radius=g.get("radius", 0),
            group_speed=g.get("speed", 0),
            start_time=g.get("start_time", 0),
            bounds=bounds,
            rng=rng,
            group_slot=group_slot,
        )
        agents.extend(Agent(st, policy, start_time=start) for st, start in members)
    return agents


def build_simulation(cfg, rng=None):
    """Build the street map, the shared group-walk policy, and the simulator from a config dict."""
    rng = rng or np.random.default_rng(cfg.get("seed"))
    space = build_env(cfg)
    period = cfg.get("period", 1.0)
    if period <= 0:
        raise ValueError(f"period must be positive, got {period}")
    policy = GroupWalkPolicy(bounds=space.bounds, group_slot=cfg.get("group_slot", GROUP_SLOT))
    agents = build_agents(cfg, policy, space.bounds, rng)
    return Simulator(agents, space, period=period, rng=rng)
