import pytest

from chaos_game.core.description import ChaosGameDescription
from chaos_game.core.linalg import Vector2D, Complex
from chaos_game.core.presets import (
    DescriptionRegistry, sierpinski, julia_description, explore_julia, JULIA_MIN, JULIA_MAX,
)
from chaos_game.core.transforms import JuliaTransform, ExploreJulia

from conftest import IDENTITY


@pytest.mark.parametrize("name", ['sierpinski', 'barnsley', 'julia', 'explore_julia'])
def test_presets_are_valid(name):
    description = DescriptionRegistry.create(name)
    description.validate()
    assert 1 <= len(description.transforms) <= 4


def test_create_returns_fresh_instances():
    first = DescriptionRegistry.create('sierpinski')
    first.min_coords = Vector2D(-1.0, -1.0)
    assert DescriptionRegistry.create('sierpinski').min_coords == Vector2D(0.0, 0.0)


def test_lookup_ignores_case_and_whitespace():
    assert DescriptionRegistry.create(' Sierpinski ') == sierpinski()


def test_unknown_preset():
    with pytest.raises(ValueError, match="Unknown preset"):
        DescriptionRegistry.create('mandelbrot')


def test_list_presets_has_summaries():
    presets = DescriptionRegistry.list_presets()
    assert set(presets) >= {'sierpinski', 'barnsley', 'julia', 'explore_julia'}
    assert presets['barnsley'].startswith("Barnsley fern")


def test_register(monkeypatch):
    monkeypatch.setattr(DescriptionRegistry, '_presets', dict(DescriptionRegistry._presets))

    def square():
        """Identity map on a square."""
        return ChaosGameDescription(Vector2D(-1.0, -1.0), Vector2D(1.0, 1.0), [IDENTITY])

    DescriptionRegistry.register('Square', square)
    assert DescriptionRegistry.create('square').transforms == (IDENTITY,)
    assert DescriptionRegistry.list_presets()['square'] == "Identity map on a square."

    with pytest.raises(ValueError):
        DescriptionRegistry.register('broken', None)


def test_julia_description_has_both_branches():
    description = julia_description(0.3, -0.2)
    assert description.transforms == JuliaTransform.pair(Complex(0.3, -0.2))
    assert (description.min_coords, description.max_coords) == (JULIA_MIN, JULIA_MAX)


def test_explore_julia_default_constant():
    assert explore_julia().transforms == (ExploreJulia(Complex(-0.835, 0.2321)),)
