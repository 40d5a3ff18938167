import json

import numpy as np
import pytest
from click.testing import CliRunner
from PIL import Image

from chaos_game import __version__
from chaos_game.cli.main import main
from chaos_game.io.description_file import read_description


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(main, ['--version'])
    assert result.exit_code == 0
    assert f"chaos-game v{__version__}" in result.output


def test_presets(runner):
    result = runner.invoke(main, ['--verbose', 'presets'])
    assert result.exit_code == 0
    assert "sierpinski" in result.output
    assert "Barnsley fern" in result.output
    assert "viridis" in result.output


def test_chaos_png(runner, tmp_path):
    output = tmp_path / "fern.png"
    result = runner.invoke(main, ['chaos', str(output), '--preset', 'barnsley',
                                  '--steps', '3000', '-w', '40', '-h', '60',
                                  '--seed', '1', '--palette', 'fern'])
    assert result.exit_code == 0, result.output
    assert "Saved" in result.output
    with Image.open(output) as img:
        assert img.size == (40, 60)


def test_chaos_from_file_raw(runner, tmp_path):
    description_path = tmp_path / "tri.txt"
    output = tmp_path / "tri.npy"
    assert runner.invoke(main, ['save-preset', 'sierpinski', str(description_path)]).exit_code == 0

    result = runner.invoke(main, ['chaos', str(output), '--file', str(description_path),
                                  '-n', '1000', '-w', '20', '-h', '20', '--linear'])
    assert result.exit_code == 0, result.output
    assert np.load(output).sum() == 1000


def test_chaos_uses_config_file(runner, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({'render': {'width': 24, 'height': 16, 'steps': 500}}),
                           encoding='utf-8')
    output = tmp_path / "out.npy"

    result = runner.invoke(main, ['--config', str(config_path), 'chaos', str(output)])
    assert result.exit_code == 0, result.output
    counts = np.load(output)
    assert counts.shape == (16, 24)
    assert counts.sum() == 500


def test_chaos_rejects_bad_steps(runner, tmp_path):
    result = runner.invoke(main, ['chaos', str(tmp_path / "x.png"), '--steps', '0',
                                  '-w', '20', '-h', '20'])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_chaos_unknown_preset(runner, tmp_path):
    result = runner.invoke(main, ['chaos', str(tmp_path / "x.png"), '--preset', 'dragon',
                                  '-w', '20', '-h', '20', '-n', '10'])
    assert result.exit_code == 1
    assert "Unknown preset" in result.output


def test_explore(runner, tmp_path):
    output = tmp_path / "julia.npy"
    result = runner.invoke(main, ['explore', str(output), '--julia-c=-0.835,0.2321',
                                  '-w', '20', '-h', '20', '--max-iter', '50'])
    assert result.exit_code == 0, result.output
    values = np.load(output)
    assert values.shape == (20, 20)
    assert values.max() <= 50


def test_explore_bounds(runner, tmp_path):
    output = tmp_path / "zoomed.png"
    result = runner.invoke(main, ['explore', str(output), '--bounds=-0.5,-0.5,0.5,0.5',
                                  '-w', '16', '-h', '12', '--max-iter', '20'])
    assert result.exit_code == 0, result.output
    with Image.open(output) as img:
        assert img.size == (16, 12)


@pytest.mark.parametrize("bounds", ["1,2,3", "a,b,c,d", "1,1,0,0"])
def test_explore_bad_bounds(runner, tmp_path, bounds):
    result = runner.invoke(main, ['explore', str(tmp_path / "x.png"), '--bounds', bounds,
                                  '-w', '10', '-h', '10'])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_save_preset_and_show(runner, tmp_path):
    path = tmp_path / "fern.txt"
    result = runner.invoke(main, ['save-preset', 'barnsley', str(path)])
    assert result.exit_code == 0
    assert len(read_description(path).transforms) == 4

    result = runner.invoke(main, ['show', str(path)])
    assert result.exit_code == 0
    assert "Transforms (4)" in result.output
    assert "Probabilities: [1, 85, 7, 7]" in result.output


def test_show_malformed_file(runner, tmp_path):
    path = tmp_path / "broken.txt"
    path.write_text("0 0 1 1\n0.5 0.5\n", encoding='utf-8')
    result = runner.invoke(main, ['show', str(path)])
    assert result.exit_code == 1
    assert "line 2" in result.output
