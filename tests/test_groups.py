import numpy as np
import pytest

from groupwalk.core.groups import GROUP_SLOT, group_of, is_leader, kmh_to_ms, leader_id, spawn_group


def test_leader_id_is_idempotent_and_not_above_uid():
    for uid in list(range(0, 350)) + [9999, 123456]:
        lead = leader_id(uid)
        assert leader_id(lead) == lead
        assert lead <= uid
        assert lead % GROUP_SLOT == 0


def test_followers_lie_strictly_between_leader_and_next_slot():
    for uid in (101, 150, 199):
        assert not is_leader(uid)
        assert leader_id(uid) == 100
        assert 100 < uid < 200
    assert is_leader(0)
    assert is_leader(300)
    assert group_of(257) == 2


def test_custom_group_slot():
    assert leader_id(27, group_slot=10) == 20
    assert is_leader(30, group_slot=10)


def test_speed_conversion():
    assert kmh_to_ms(36) == pytest.approx(10.0)
    assert kmh_to_ms(0) == 0


def test_spawn_group_assigns_arithmetic_ids_and_shared_parameters():
    rng = np.random.default_rng(0)
    members = spawn_group(group_id=2, group_size=10, group_radius=5, group_speed=36, start_time=4, rng=rng)
    ids = [st.id for st, _ in members]
    assert ids == list(range(200, 210))
    for st, start in members:
        assert start == 4
        assert st.speed == pytest.approx(10.0)
        assert st.radius == 5
        assert 0 <= st.pos[0] <= 1200 and 0 <= st.pos[1] <= 800
        assert leader_id(st.id) == 200


@pytest.mark.parametrize(
    "group_id,size,radius",
    [(-1, 5, 1), (0, 0, 1), (0, 100, 1), (0, 5, -1)],
)
def test_spawn_group_rejects_invalid_parameters(group_id, size, radius):
    with pytest.raises(ValueError):
        spawn_group(group_id=group_id, group_size=size, group_radius=radius)


def test_spawn_group_allows_largest_group():
    members = spawn_group(group_id=0, group_size=99, group_radius=0, rng=np.random.default_rng(1))
    assert members[-1][0].id == 98
