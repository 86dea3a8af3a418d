import math

import pytest

from thera.core import Quaternion, Transform, WorldTransform, update_world_transform


def _dot(a, b):
    return sum(x * y for x, y in zip(a, b))


def test_identity_directions():
    world = WorldTransform()
    assert world.forward() == pytest.approx((0.0, 0.0, -1.0))
    assert world.right() == pytest.approx((1.0, 0.0, 0.0))
    assert world.up() == pytest.approx((0.0, 1.0, 0.0))


@pytest.mark.parametrize("angle", [0.3, 1.2, 2.9])
def test_directions_stay_orthonormal(angle):
    rotation = Quaternion.from_axis_angle((1.0, 2.0, 0.5), angle)
    world = WorldTransform(rotation=rotation)
    forward, right, up = world.forward(), world.right(), world.up()
    for v in (forward, right, up):
        assert _dot(v, v) == pytest.approx(1.0)
    assert _dot(forward, right) == pytest.approx(0.0, abs=1e-9)
    assert _dot(forward, up) == pytest.approx(0.0, abs=1e-9)
    assert _dot(right, up) == pytest.approx(0.0, abs=1e-9)


def test_rotate_inverse_undoes_rotate():
    rotation = Quaternion.from_axis_angle((0.0, 1.0, 1.0), 0.7)
    vector = (3.0, -2.0, 5.0)
    assert rotation.rotate_inverse(rotation.rotate(vector)) == pytest.approx(vector)


def test_rotation_keeps_length():
    rotation = Quaternion.from_axis_angle((0.0, 0.0, 1.0), math.pi / 3)
    vector = (1.0, 2.0, 3.0)
    rotated = rotation.rotate(vector)
    assert _dot(rotated, rotated) == pytest.approx(_dot(vector, vector))


def test_identity_multiplication():
    q = Quaternion.from_axis_angle((1.0, 0.0, 0.0), 0.4)
    assert q * Quaternion() == q
    assert Quaternion() * q == q


def test_zero_quaternion_has_no_inverse():
    with pytest.raises(ValueError):
        Quaternion(0.0, 0.0, 0.0, 0.0).inverse()


def test_world_transform_without_parent_copies_local():
    rotation = Quaternion.from_axis_angle((0.0, 1.0, 0.0), 1.0)
    local = Transform((1.0, 2.0, 3.0), rotation, (2.0, 2.0, 2.0))
    world = update_world_transform(local)
    assert world.position == local.position
    assert world.rotation == local.rotation
    assert world.scale == local.scale


def test_identity_parent_leaves_local_unchanged():
    rotation = Quaternion.from_axis_angle((0.0, 1.0, 0.0), 1.0)
    local = Transform((1.0, 2.0, 3.0), rotation, (2.0, 0.5, 4.0))
    world = update_world_transform(local, WorldTransform())
    assert world.position == pytest.approx(local.position)
    assert world.scale == pytest.approx(local.scale)
    assert world.rotation == local.rotation


def test_parent_contributes_position_rotation_and_scale():
    parent_rotation = Quaternion.from_axis_angle((0.0, 0.0, 1.0), 0.5)
    parent = WorldTransform((4.0, -1.0, 2.0), parent_rotation, (3.0, 3.0, 3.0))
    world = update_world_transform(Transform(), parent)
    assert world.position == pytest.approx(parent.position)
    assert world.scale == pytest.approx(parent.scale)
    assert world.rotation == parent_rotation