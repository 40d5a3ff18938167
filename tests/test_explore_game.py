from threading import Event

import numpy as np
import pytest

from chaos_game.acceleration.tiling import (
    SweepCancelled, TiledSweep, create_tile_grid, process_tile, SweepParams,
)
from chaos_game.core.canvas import ChaosCanvas
from chaos_game.core.description import ChaosGameDescription
from chaos_game.core.escape import EscapeTimeIterator
from chaos_game.core.game import ExploreGame
from chaos_game.core.linalg import Vector2D, Complex, Matrix2x2
from chaos_game.core.transforms import AffineTransform2D, ExploreJulia


class TestEscapeTimeIterator:
    def test_rejects_bad_parameters(self):
        with pytest.raises(ValueError):
            EscapeTimeIterator(max_iter=0)
        with pytest.raises(ValueError):
            EscapeTimeIterator(escape_radius=-1.0)

    def test_outside_radius_escapes_immediately(self):
        iterator = EscapeTimeIterator(50, 2.0)
        transform = ExploreJulia(Complex(-0.835, 0.2321))
        assert iterator.iterate_point(transform, Vector2D(3.0, 0.0)) == 0

    def test_fixed_point_never_escapes(self):
        iterator = EscapeTimeIterator(30, 2.0)
        assert iterator.iterate_point(ExploreJulia(Complex(0.0, 0.0)), Vector2D(0.0, 0.0)) == 30

    def test_escape_counts_applications(self):
        # z -> 2z from 0.6: |z| is 0.6, 1.2, 2.4 so the third check escapes
        doubling = AffineTransform2D(Matrix2x2(2.0, 0.0, 0.0, 2.0), Vector2D(0.0, 0.0))
        assert EscapeTimeIterator(10, 2.0).iterate_point(doubling, Vector2D(0.6, 0.0)) == 2

    def test_vectorized_path_matches_scalar_path(self):
        iterator = EscapeTimeIterator(60, 2.0)
        transform = ExploreJulia(Complex(-0.835, 0.2321))
        canvas = ChaosCanvas(23, 17, Vector2D(-1.6, -1.0), Vector2D(1.6, 1.0))
        xs, ys = canvas.coordinate_grid()

        vectorized = iterator.iterate_grid(transform, xs, ys)
        scalar = np.array([[iterator.iterate_point(transform, Vector2D(xs[r, c], ys[r, c]))
                            for c in range(xs.shape[1])] for r in range(xs.shape[0])])

        np.testing.assert_array_equal(vectorized, scalar)

    def test_non_quadratic_transform_uses_scalar_path(self):
        iterator = EscapeTimeIterator(10, 2.0)
        doubling = AffineTransform2D(Matrix2x2(2.0, 0.0, 0.0, 2.0), Vector2D(0.0, 0.0))
        xs = np.array([[0.0, 0.6, 3.0]])
        ys = np.zeros((1, 3))
        np.testing.assert_array_equal(iterator.iterate_grid(doubling, xs, ys), [[10, 2, 0]])


class TestTiling:
    def test_grid_covers_canvas_once(self):
        tiles = create_tile_grid(50, 30, tile_size=16)
        covered = np.zeros((30, 50), dtype=int)
        for tile in tiles:
            covered[tile.y_start:tile.y_end, tile.x_start:tile.x_end] += 1
        assert (covered == 1).all()
        assert [t.tile_id for t in tiles] == list(range(len(tiles)))

    def test_rejects_bad_tile_size(self):
        with pytest.raises(ValueError):
            create_tile_grid(10, 10, tile_size=0)
        with pytest.raises(ValueError):
            TiledSweep(tile_size=0)

    def test_process_tile_shape(self):
        params = SweepParams(ExploreJulia(Complex(-0.835, 0.2321)), Vector2D(-1.6, -1.0),
                             Vector2D(1.6, 1.0), 20, 20, 50, 2.0)
        tile = create_tile_grid(20, 20, tile_size=8)[-1]
        result = process_tile(params, tile)
        assert result.values.shape == (tile.height, tile.width)


class TestExploreGame:
    def test_scenario_values_in_range_and_deterministic(self, explore_description):
        first = ExploreGame(explore_description, 20, 20, max_iterations=50)
        values = first.explore_fractals().copy()

        assert values.shape == (20, 20)
        assert values.min() >= 0
        assert values.max() <= 50
        assert (values == np.floor(values)).all()

        second = ExploreGame(explore_description.copy(), 20, 20, max_iterations=50)
        np.testing.assert_array_equal(values, second.explore_fractals())

    def test_rerun_is_identical(self, explore_description):
        game = ExploreGame(explore_description, 20, 20, max_iterations=50)
        first = game.explore_fractals().copy()
        np.testing.assert_array_equal(first, game.explore_fractals())

    def test_every_cell_matches_scalar_iteration(self, explore_description):
        game = ExploreGame(explore_description, 12, 9, max_iterations=40, tile_size=5)
        values = game.explore_fractals()
        transform = explore_description.transforms[0]
        for row in range(9):
            for col in range(12):
                start = game.canvas.transform_indices_to_coords(col, row)
                assert values[row, col] == game.iterator.iterate_point(transform, start)

    def test_parallel_matches_sequential(self, explore_description):
        sequential = ExploreGame(explore_description, 20, 20, max_iterations=50, tile_size=8)
        parallel = ExploreGame(explore_description.copy(), 20, 20, max_iterations=50,
                               workers=2, tile_size=8)
        np.testing.assert_array_equal(sequential.explore_fractals(),
                                      parallel.explore_fractals())

    def test_cancel(self, explore_description):
        game = ExploreGame(explore_description, 20, 20, max_iterations=50)
        cancel = Event()
        cancel.set()
        with pytest.raises(SweepCancelled):
            game.explore_fractals(cancel)

    def test_window_committed_on_render(self, explore_description):
        game = ExploreGame(explore_description, 20, 20)
        game.description.min_coords = Vector2D(-0.8, -0.5)
        game.description.max_coords = Vector2D(0.8, 0.5)
        game.explore_fractals()
        assert game.canvas.min_coords == Vector2D(-0.8, -0.5)
        assert game.canvas.max_coords == Vector2D(0.8, 0.5)

    def test_invalid_window_fails_on_render(self, explore_description):
        game = ExploreGame(explore_description, 20, 20)
        game.description.min_coords = Vector2D(-60.0, -1.0)
        with pytest.raises(ValueError):
            game.explore_fractals()

    def test_set_max_iterations(self, explore_description):
        game = ExploreGame(explore_description, 20, 20, max_iterations=50)
        game.set_max_iterations(5)
        assert game.explore_fractals().max() <= 5
        assert game.get_info()['max_iterations'] == 5

    def test_affine_description(self):
        doubling = AffineTransform2D(Matrix2x2(2.0, 0.0, 0.0, 2.0), Vector2D(0.0, 0.0))
        description = ChaosGameDescription(Vector2D(-1.0, -1.0), Vector2D(1.0, 1.0), [doubling])
        game = ExploreGame(description, 5, 5, max_iterations=20)
        values = game.explore_fractals()
        assert values[2, 2] == 20
        assert values[0, 0] < 20

    def test_listener(self, explore_description):
        game = ExploreGame(explore_description, 20, 20)
        events = []
        game.add_listener(events.append)
        game.explore_fractals()
        game.resize(10, 10)
        assert [e.kind for e in events] == ['explore', 'description']
        assert game.canvas.get_canvas_array().shape == (10, 10)
