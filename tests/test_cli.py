import math

import numpy as np
import pytest
import trimesh

from stl_to_pins import (
    FallbackUndefinedError,
    Grid,
    Mesh,
    calculate_pin_heights,
    gcode_lines,
    generate_depth_map,
    normalize,
)
from stl_to_pins.cli import main


@pytest.fixture
def wedge_stl(tmp_path):
    """Downward-facing triangle whose height rises 0.2 per unit of x."""
    path = tmp_path / "wedge.stl"
    vertices = np.array([[0, 0, 0], [0, 20, 0], [20, 0, 4]], dtype=float)
    trimesh.Trimesh(vertices=vertices, faces=[[0, 1, 2]], process=False).export(str(path))
    return path


def test_main_writes_gcode(wedge_stl, tmp_path):
    out = tmp_path / "wedge.gcode"
    rc = main([str(wedge_stl), "-o", str(out), "--region", "0", "10", "0", "10", "--grid", "3"])
    assert rc == 0

    lines = out.read_text().splitlines()
    assert lines[0] == "G28 X Y"
    assert lines[1:4] == ["G0 X5.000 Y0.000", "G0 Z1.000", "G0 Z0.000"]
    assert lines[4:7] == ["G0 X10.000 Y0.000", "G0 Z2.000", "G0 Z0.000"]
    # x = 0 column is at the base plane and needs no motion
    assert len(lines) == 1 + 6 * 3
    assert not any(line.startswith("G0 X0.000") for line in lines)


def test_main_stdout_and_precision(wedge_stl, capsys):
    rc = main([str(wedge_stl), "-o", "-", "--region", "0", "10", "0", "10",
               "--grid", "2", "--precision", "1"])
    assert rc == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "G28 X Y",
        "G0 X10.0 Y0.0", "G0 Z2.0", "G0 Z0.0",
        "G0 X10.0 Y10.0", "G0 Z2.0", "G0 Z0.0",
    ]


def test_main_rotation_off_the_bed_fails(wedge_stl):
    # a half turn leaves no surface over the bed, so no fallback height exists
    rc = main([str(wedge_stl), "-o", "-", "--region", "1", "10", "1", "10",
               "--grid", "2", "--angle", str(math.pi)])
    assert rc == 1


def test_main_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.stl"), "-o", str(tmp_path / "x.gcode")]) == 1


def test_main_rejects_bad_grid(wedge_stl, tmp_path):
    assert main([str(wedge_stl), "-o", str(tmp_path / "x.gcode"), "--grid", "1"]) == 1


def test_pyramid_end_to_end(pyramid):
    grid = Grid(0, 10, 0, 10, size=2)
    pins = calculate_pin_heights(generate_depth_map(normalize(pyramid), grid), grid)
    assert [(p.x, p.y) for p in pins] == [(0, 0), (10, 0), (0, 10), (10, 10)]
    assert all(p.height.z == 0 for p in pins)
    assert gcode_lines(pins) == ["G28 X Y"]


def test_flat_surface_end_to_end(flat_down):
    grid = Grid(0, 10, 0, 10)
    pins = calculate_pin_heights(generate_depth_map(flat_down, grid), grid)
    assert not any(p.height.is_undetermined for p in pins)
    lines = gcode_lines(pins)
    assert len(lines) == 1 + 100 * 3
    assert set(lines[2::3]) == {"G0 Z5.000"}


def test_empty_mesh_end_to_end():
    grid = Grid(0, 10, 0, 10)
    depth = generate_depth_map(Mesh(), grid)
    assert depth.undetermined_count() == 100
    with pytest.raises(FallbackUndefinedError):
        gcode_lines(calculate_pin_heights(depth, grid))


@pytest.fixture
def layered_stl(tmp_path):
    """Two stacked downward triangles over the same footprint, lower one first."""
    path = tmp_path / "layers.stl"
    vertices = np.array([
        [0, 0, 1], [0, 20, 1], [20, 0, 1],
        [0, 0, 3], [0, 20, 3], [20, 0, 3],
    ], dtype=float)
    faces = [[0, 1, 2], [3, 4, 5]]
    trimesh.Trimesh(vertices=vertices, faces=faces, process=False).export(str(path))
    return path


def test_main_tie_break(layered_stl, capsys):
    args = [str(layered_stl), "-o", "-", "--region", "0", "10", "0", "10", "--grid", "2"]

    assert main(args) == 0
    # lower layer sits on the base plane after normalization
    assert capsys.readouterr().out.splitlines() == ["G28 X Y"]

    assert main(args + ["--tie-break", "highest"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert len(out) == 1 + 4 * 3
    assert set(out[2::3]) == {"G0 Z2.000"}


def test_main_log_file_verbose(wedge_stl, tmp_path):
    log = tmp_path / "run.log"
    rc = main([str(wedge_stl), "-o", str(tmp_path / "w.gcode"), "--region", "0", "10", "0", "10",
               "--grid", "2", "-v", "--log-file", str(log)])
    assert rc == 0
    text = log.read_text()
    assert "DEBUG" in text
    assert "pins need motion" in text


def test_main_unwritable_log_file(wedge_stl, tmp_path):
    rc = main([str(wedge_stl), "-o", "-", "--log-file", str(tmp_path / "nodir" / "x.log")])
    assert rc == 1
