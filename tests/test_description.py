import pytest

from chaos_game.core.description import ChaosGameDescription, validate_probabilities
from chaos_game.core.linalg import Vector2D, Matrix2x2

from conftest import IDENTITY


def make(min_coords=(-1.0, -1.0), max_coords=(1.0, 1.0), transforms=(IDENTITY,),
         probabilities=None):
    return ChaosGameDescription(Vector2D(*min_coords), Vector2D(*max_coords),
                                transforms, probabilities)


class TestCoordinates:
    @pytest.mark.parametrize("min_coords, max_coords", [
        ((-51.0, 0.0), (1.0, 1.0)),
        ((0.0, 0.0), (1.0, 50.5)),
    ])
    def test_out_of_range(self, min_coords, max_coords):
        with pytest.raises(ValueError, match="between"):
            make(min_coords, max_coords)

    def test_limits_are_inclusive(self):
        make((-50.0, -50.0), (50.0, 50.0))

    def test_equal_corners(self):
        with pytest.raises(ValueError, match="cannot be the same"):
            make((1.0, 1.0), (1.0, 1.0))

    @pytest.mark.parametrize("min_coords, max_coords", [
        ((2.0, 0.0), (1.0, 1.0)),
        ((0.0, 2.0), (1.0, 1.0)),
        ((0.0, 1.0), (1.0, 1.0)),
    ])
    def test_min_not_below_max(self, min_coords, max_coords):
        with pytest.raises(ValueError, match="less than"):
            make(min_coords, max_coords)


class TestTransforms:
    def test_none(self):
        with pytest.raises(ValueError, match="None"):
            make(transforms=None)

    def test_empty(self):
        with pytest.raises(ValueError, match="between 1 and 4"):
            make(transforms=[])

    def test_too_many(self):
        with pytest.raises(ValueError, match="between 1 and 4"):
            make(transforms=[IDENTITY] * 5)

    def test_four_allowed(self):
        assert len(make(transforms=[IDENTITY] * 4).transforms) == 4

    def test_unsupported_variant(self):
        with pytest.raises(ValueError, match="Unsupported"):
            make(transforms=[Matrix2x2(1.0, 0.0, 0.0, 1.0)])

    def test_stored_as_tuple(self):
        assert isinstance(make(transforms=[IDENTITY]).transforms, tuple)


class TestProbabilities:
    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="match"):
            make(transforms=[IDENTITY, IDENTITY], probabilities=[1])

    def test_negative(self):
        with pytest.raises(ValueError, match="negative"):
            make(transforms=[IDENTITY, IDENTITY], probabilities=[2, -1])

    def test_zero_sum(self):
        with pytest.raises(ValueError, match="positive sum"):
            make(transforms=[IDENTITY, IDENTITY], probabilities=[0, 0])

    def test_fractional_weights_rejected(self):
        with pytest.raises(ValueError, match="whole numbers"):
            make(transforms=[IDENTITY, IDENTITY], probabilities=[1.9, 0.9])

    def test_whole_float_weights_stored_as_ints(self):
        description = make(transforms=[IDENTITY, IDENTITY], probabilities=[2.0, 1.0])
        assert description.probabilities == (2, 1)
        assert all(type(p) is int for p in description.probabilities)

    def test_validate_probabilities_rejects_fractional(self):
        with pytest.raises(ValueError, match="whole numbers"):
            validate_probabilities([0.5], 1)

    def test_weights_normalized(self):
        description = make(transforms=[IDENTITY] * 4, probabilities=[1, 85, 7, 7])
        assert description.weights == pytest.approx((0.01, 0.85, 0.07, 0.07))

    def test_uniform_when_absent(self):
        assert make().weights is None


class TestMutation:
    def test_set_window_validates(self):
        description = make()
        with pytest.raises(ValueError):
            description.set_window(Vector2D(1.0, 1.0), Vector2D(0.0, 0.0))
        assert description.min_coords == Vector2D(-1.0, -1.0)

    def test_set_window(self):
        description = make()
        description.set_window(Vector2D(-2.0, -3.0), Vector2D(4.0, 5.0))
        assert description.max_coords == Vector2D(4.0, 5.0)

    def test_direct_assignment_is_unchecked_until_validate(self):
        description = make()
        description.min_coords = Vector2D(5.0, 5.0)
        with pytest.raises(ValueError):
            description.validate()

    def test_set_transforms_checks_weights(self):
        description = make(transforms=[IDENTITY, IDENTITY], probabilities=[1, 1])
        with pytest.raises(ValueError):
            description.set_transforms([IDENTITY])
        assert len(description.transforms) == 2

    def test_copy_is_independent(self):
        description = make()
        duplicate = description.copy()
        duplicate.min_coords = Vector2D(-0.5, -0.5)
        assert description.min_coords == Vector2D(-1.0, -1.0)
        assert duplicate.transforms == description.transforms


def test_summary():
    summary = make(transforms=[IDENTITY, IDENTITY], probabilities=[3, 1]).summary()
    assert summary['min_coords'] == (-1.0, -1.0)
    assert summary['probabilities'] == [3, 1]
    assert summary['transforms'][0]['type'] == 'affine'
