import numpy as np
import pytest

from groupwalk.comms.directory import PositionDirectory
from groupwalk.core.agent import Agent
from groupwalk.core.simulator import Simulator
from groupwalk.core.state import SwarmState
from groupwalk.policies.group_walk import GroupWalkPolicy

from conftest import OpenPlane, ScriptedRng, make_state


def test_followers_read_round_start_leader_position():
    policy = GroupWalkPolicy()
    leader = Agent(make_state(0, (100, 100), speed=10.0), policy)
    follower = Agent(make_state(1, (500, 500), speed=10.0, radius=0.0), policy)
    sim = Simulator([follower, leader], OpenPlane(), rng=np.random.default_rng(3))

    state = sim.step()
    assert state.agents[1].pos.tolist() == [100.0, 100.0]
    leader_after_first = state.agents[0].pos.copy()

    state = sim.step()
    moved = np.linalg.norm(state.agents[1].pos - np.array([100.0, 100.0]))
    expected = min(10.0, float(np.linalg.norm(leader_after_first - np.array([100.0, 100.0]))))
    assert moved == pytest.approx(expected)


def test_spawn_start_time_delays_activation():
    policy = GroupWalkPolicy()
    early = Agent(make_state(0, (10, 10)), policy)
    late = Agent(make_state(100, (20, 20)), policy, start_time=3)
    sim = Simulator([early, late], OpenPlane(), rng=np.random.default_rng(0))
    for _ in range(3):
        state = sim.step()
        assert 100 not in state.agents
    state = sim.step()
    assert 100 in state.agents
    assert state.t == pytest.approx(4.0)


def test_duplicate_ids_rejected():
    policy = GroupWalkPolicy()
    sim = Simulator(
        [Agent(make_state(0, (1, 1)), policy), Agent(make_state(0, (2, 2)), policy)],
        OpenPlane(),
    )
    with pytest.raises(ValueError):
        sim.step()


def test_step_logs_and_run_callback():
    policy = GroupWalkPolicy()
    sim = Simulator([Agent(make_state(0, (50, 50)), policy)], OpenPlane(), rng=np.random.default_rng(1))
    state, logs = sim.step(return_logs=True)
    assert logs[0]["debug"].startswith("sp:")
    seen = []
    sim.run(3, callback=lambda step, st: seen.append((step, st.t)))
    assert seen == [(0, 2.0), (1, 3.0), (2, 4.0)]


def test_directory_lookup():
    st = make_state(5, (1, 2))
    directory = PositionDirectory(SwarmState(agents={5: st}, t=0.0))
    pos = directory.lookup_position(5)
    pos[0] = 99
    assert directory.lookup_position(5).tolist() == [1.0, 2.0]
    assert 5 in directory and len(directory) == 1
    with pytest.raises(KeyError):
        directory.lookup_position(6)


def test_round_period_scales_travel_budget():
    policy = GroupWalkPolicy()
    leader = Agent(make_state(0, (100, 100), speed=5.0), policy)
    sim = Simulator([leader], OpenPlane(), period=2.0, rng=ScriptedRng([(200, 100), (300, 300)]))
    state, logs = sim.step(return_logs=True)
    assert state.t == pytest.approx(2.0)
    assert state.agents[0].pos.tolist() == pytest.approx([110.0, 100.0])
    assert logs[0]["target"].tolist() == [200.0, 100.0]
