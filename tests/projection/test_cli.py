"""Tests for the projection command-line interface."""

import json
import tempfile
from pathlib import Path

import numpy as np

from src.projection.cli import build_parser, config_from_args, main
from src.projection.keep_policy import Keep

POINT_DTYPE = np.dtype([("x", "<f4"), ("y", "<f4"), ("z", "<f4"), ("intensity", "<f4")])


def write_scan(path, xyz):
    xyz = np.asarray(xyz, dtype=np.float32)
    points = np.zeros(len(xyz), dtype=POINT_DTYPE)
    points["x"], points["y"], points["z"] = xyz[:, 0], xyz[:, 1], xyz[:, 2]
    points["intensity"] = np.arange(len(xyz))
    np.save(path, points)


class TestCli:
    """Test suite for the range-project command."""

    def test_projects_files(self):
        """Test end-to-end projection of two scans."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            write_scan(tmp / "a.npy", [[1, 0, 0], [2, 0, 0], [0, 1, 0]])
            write_scan(tmp / "b.npy", [[0, 0, 0], [1, 0, 0]])
            out_dir = tmp / "out"

            status = main([
                "--input", str(tmp / "a.npy"), str(tmp / "b.npy"),
                "--output-dir", str(out_dir),
                "--width", "6", "--height", "2",
                "--keep", "closest",
                "--save-index",
            ])

            assert status == 0
            out = np.load(out_dir / "a.npy")
            index = np.load(out_dir / "a_index.npy")
            assert out.shape == (2, 6)
            assert out.dtype.names == POINT_DTYPE.names
            assert index.shape == (2, 6)
            assert (index >= 0).sum() == 2
            # The range-1 point wins over the range-2 point in the same direction
            assert 0 in index
            assert 1 not in index
            assert (out_dir / "b.npy").exists()

            meta = json.loads((out_dir / "meta.json").read_text())
            assert meta["frames_written"] == 2
            assert meta["config"]["keep"] == "closest"
            assert meta["stats"]["invalid"] == 1
            assert meta["stats"]["collisions"] == 1

    def test_bad_input_is_skipped(self):
        """Test that a cloud breaking the contract fails without stopping the batch."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            write_scan(tmp / "good.npy", [[1, 0, 0]])
            np.save(tmp / "no_xyz.npy", np.zeros(3, dtype=[("range", "<f4")]))
            out_dir = tmp / "out"

            status = main([
                "--input", str(tmp / "no_xyz.npy"), str(tmp / "good.npy"),
                "--output-dir", str(out_dir),
            ])

            assert status == 1
            assert (out_dir / "good.npy").exists()
            assert not (out_dir / "no_xyz.npy").exists()
            meta = json.loads((out_dir / "meta.json").read_text())
            assert meta["frames_written"] == 1
            assert len(meta["failed"]) == 1

    def test_unloadable_inputs_are_skipped(self):
        """Test that object arrays, corrupt and missing files do not stop the batch."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            np.save(tmp / "objects.npy", np.array([{"x": 1.0}, None], dtype=object), allow_pickle=True)
            (tmp / "corrupt.npy").write_bytes(b"not a numpy file")
            write_scan(tmp / "good.npy", [[1, 0, 0]])
            out_dir = tmp / "out"

            status = main([
                "--input",
                str(tmp / "objects.npy"),
                str(tmp / "corrupt.npy"),
                str(tmp / "missing.npy"),
                str(tmp / "good.npy"),
                "--output-dir", str(out_dir),
            ])

            assert status == 1
            assert (out_dir / "good.npy").exists()
            meta = json.loads((out_dir / "meta.json").read_text())
            assert meta["frames_requested"] == 4
            assert meta["frames_written"] == 1
            assert len(meta["failed"]) == 3

    def test_float64_input_detected(self):
        """Test that double precision inputs are projected without --dtype."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            points = np.zeros(2, dtype=[("x", "<f8"), ("y", "<f8"), ("z", "<f8")])
            points["x"] = [1.0, 0.0]
            points["y"] = [0.0, 1.0]
            np.save(tmp / "f8.npy", points)
            out_dir = tmp / "out"

            status = main([
                "--input", str(tmp / "f8.npy"),
                "--output-dir", str(out_dir),
                "--width", "6", "--height", "1",
                "--save-index",
            ])

            assert status == 0
            index = np.load(out_dir / "f8_index.npy")
            assert index[0, 3] == 0
            assert index[0, 1] == 1
            meta = json.loads((out_dir / "meta.json").read_text())
            assert meta["dtype"] == "auto"

    def test_forced_dtype_mismatch_fails(self):
        """Test that --dtype float32 refuses a double precision input."""
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            points = np.zeros(2, dtype=[("x", "<f8"), ("y", "<f8"), ("z", "<f8")])
            points["x"] = 1.0
            np.save(tmp / "f8.npy", points)
            out_dir = tmp / "out"

            status = main([
                "--input", str(tmp / "f8.npy"),
                "--output-dir", str(out_dir),
                "--dtype", "float32",
            ])

            assert status == 1
            assert not (out_dir / "f8.npy").exists()

    def test_config_file_with_overrides(self):
        """Test that command-line values override the YAML config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = Path(tmpdir) / "projection.yaml"
            cfg.write_text("projection:\n  width: 1024\n  height: 64\n  keep: first\n")

            args = build_parser().parse_args([
                "--input", "x.npy", "--output-dir", tmpdir,
                "--config", str(cfg),
                "--keep", "farthest", "--center-azimuth", "10.5",
            ])
            config = config_from_args(args)

        assert config.width == 1024
        assert config.height == 64
        assert config.keep is Keep.FARTHEST
        assert config.center_azimuth == 10.5
        assert config.azimuth_only is False

    def test_azimuth_only_flag(self):
        """Test the azimuth-only switch."""
        args = build_parser().parse_args([
            "--input", "x.npy", "--output-dir", "out", "--azimuth-only",
        ])

        assert config_from_args(args).azimuth_only is True
