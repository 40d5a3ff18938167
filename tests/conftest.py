import pytest

from chaos_game.core.description import ChaosGameDescription
from chaos_game.core.linalg import Vector2D, Matrix2x2
from chaos_game.core.presets import sierpinski, barnsley, explore_julia
from chaos_game.core.transforms import AffineTransform2D

IDENTITY = AffineTransform2D(Matrix2x2(1.0, 0.0, 0.0, 1.0), Vector2D(0.0, 0.0))


@pytest.fixture
def identity_description():
    return ChaosGameDescription(Vector2D(-1.0, -1.0), Vector2D(1.0, 1.0), [IDENTITY])


@pytest.fixture
def sierpinski_description():
    return sierpinski()


@pytest.fixture
def barnsley_description():
    return barnsley()


@pytest.fixture
def explore_description():
    return explore_julia(-0.835, 0.2321)
