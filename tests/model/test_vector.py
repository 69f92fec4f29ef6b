"""Tests for flow_field_nav.model.vector module."""

import math

import pytest

from flow_field_nav.model.vector import ZERO, Vec2


class TestVec2Arithmetic:
    def test_add(self) -> None:
        assert Vec2(1.0, 2.0) + Vec2(0.5, -1.0) == Vec2(1.5, 1.0)

    def test_scale_both_sides(self) -> None:
        assert Vec2(1.0, -2.0) * 3 == Vec2(3.0, -6.0)
        assert 0.5 * Vec2(4.0, 2.0) == Vec2(2.0, 1.0)

    def test_zero(self) -> None:
        assert ZERO.is_zero()
        assert not Vec2(0.0, 1e-9).is_zero()


class TestVec2Clamp:
    def test_short_vector_unchanged(self) -> None:
        v = Vec2(0.3, 0.4)
        assert v.clamp(1.0) is v

    def test_long_vector_scaled_to_limit(self) -> None:
        v = Vec2(3.0, 4.0).clamp(1.0)
        assert v.magnitude() == pytest.approx(1.0)
        assert v.x == pytest.approx(0.6)
        assert v.y == pytest.approx(0.8)

    def test_diagonal_magnitude_is_clamped(self) -> None:
        v = Vec2(0.9, 0.9).clamp(1.0)
        assert v.magnitude() == pytest.approx(1.0)
        assert math.atan2(v.y, v.x) == pytest.approx(math.pi / 4)


class TestVec2MoveTo:
    def test_fraction_of_remaining_distance(self) -> None:
        v = Vec2(0.0, 0.0).move_to(Vec2(10.0, -4.0), 0.25)
        assert v == Vec2(2.5, -1.0)

    def test_full_fraction_lands_on_target(self) -> None:
        assert Vec2(3.0, 3.0).move_to(Vec2(1.0, 2.0), 1.0) == Vec2(1.0, 2.0)

    def test_repeated_approach_converges(self) -> None:
        v = Vec2(0.0, 0.0)
        target = Vec2(1.0, 1.0)
        for _ in range(200):
            v = v.move_to(target, 0.1)
        assert v.x == pytest.approx(1.0, abs=1e-6)
        assert v.y == pytest.approx(1.0, abs=1e-6)
