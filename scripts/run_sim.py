import argparse
import logging
import pathlib
import sys

import numpy as np

# Ensure repository root is on PYTHONPATH when running without installation.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from groupwalk.config import build_simulation, load_config
from groupwalk.core.metrics import coverage_extent, group_spread, mean_pairwise_distance, obstacle_violations
from groupwalk.viz.render_2d import SwarmRenderer2D
from groupwalk.viz.logger import SwarmLogger

logger = logging.getLogger("groupwalk.run_sim")


def main():
    parser = argparse.ArgumentParser(description="Run group random walk simulation.")
    parser.add_argument("--config", type=pathlib.Path, help="Path to YAML config.")
    parser.add_argument("--no-render", action="store_true", help="Disable live rendering (headless).")
    parser.add_argument("--log", type=pathlib.Path, help="Optional path to write JSON log.")
    parser.add_argument("--steps", type=int, help="Override total simulation rounds.")
    parser.add_argument("--seed", type=int, help="Override random seed.")
    parser.add_argument("--render-every", type=int, dest="render_every", help="Render every N rounds.")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (DEBUG, INFO, ...).")
    args = parser.parse_args()

    cfg = load_config(args.config)
    if args.steps is not None:
        cfg["steps"] = args.steps
    if args.seed is not None:
        cfg["seed"] = args.seed
    if args.render_every is not None:
        cfg["render_every"] = args.render_every
    level = args.log_level or cfg.get("logging", {}).get("level", "WARNING")
    logging.basicConfig(level=level.upper(), format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    sim = build_simulation(cfg, rng=np.random.default_rng(cfg.get("seed")))
    group_slot = cfg.get("group_slot", 100)
    renderer = None if args.no_render else SwarmRenderer2D(
        bounds=sim.space.bounds, obstacles=sim.space.obstacles, group_slot=group_slot
    )
    swarm_logger = SwarmLogger(args.log, group_slot=group_slot) if args.log else None

    state = None
    for step in range(cfg["steps"]):
        state = sim.step()
        spread = group_spread(state, group_slot)
        coverage = coverage_extent(state)
        cohesion = mean_pairwise_distance(state)
        if renderer and step % cfg["render_every"] == 0:
            renderer.render(state)
        if swarm_logger:
            swarm_logger.log_state(state, spread=spread, coverage=coverage, cohesion=cohesion)
        logger.info(
            "t=%.1f spread=%s coverage=%.0f cohesion=%.1f",
            state.t, {g: round(d, 1) for g, d in spread.items()}, coverage, cohesion,
        )

    if state is not None:
        print(f"Finished {cfg['steps']} rounds: {len(state.agents)} agents, "
              f"{obstacle_violations(state, sim.space)} off-street, spread {group_spread(state, group_slot)}, "
              f"coverage {coverage_extent(state):.0f}, cohesion {mean_pairwise_distance(state):.1f}")
    if swarm_logger:
        swarm_logger.flush()


if __name__ == "__main__":
    main()
