"""Batch range image projection of structured `.npy` point clouds.

Each input is a NumPy structured array (saved with `numpy.save`) of
shape (W,) or (H, W) with float x, y, z fields.  The projected cloud is
written as a structured array of the output grid size.

Usage:
    python -m src.projection.cli --input scan_*.npy --output-dir out/ \
        --config configs/projection.yaml --width 1024 --keep closest
"""

import argparse
import datetime
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
from tqdm import tqdm

from ..common.organized_cloud import OrganizedCloud
from ..utils.logging import get_logger, set_level
from .config import ProjectionConfig
from .keep_policy import Keep
from .projection import Projection
from .rasterizer import ProjectionStats

logger = get_logger(__name__)

_DTYPES = {"float32": np.float32, "float64": np.float64}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Project organized point clouds to range images"
    )
    parser.add_argument(
        "--input",
        type=str,
        nargs="+",
        required=True,
        help="Structured .npy point clouds"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        required=True,
        help="Output directory"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML file with a 'projection' section"
    )
    parser.add_argument("--height", type=int, default=None, help="Output height (0: input height)")
    parser.add_argument("--width", type=int, default=None, help="Output width (0: input width)")
    parser.add_argument("--focal-azimuth", type=float, default=None)
    parser.add_argument("--focal-elevation", type=float, default=None)
    parser.add_argument("--center-azimuth", type=float, default=None)
    parser.add_argument("--center-elevation", type=float, default=None)
    parser.add_argument(
        "--keep",
        choices=[k.name.lower() for k in Keep],
        default=None,
        help="Collision policy (default: last)"
    )
    parser.add_argument(
        "--azimuth-only",
        action="store_true",
        default=None,
        help="Keep input rows, only re-project azimuth"
    )
    parser.add_argument(
        "--dtype",
        choices=sorted(_DTYPES),
        default=None,
        help="Floating type of the x, y, z fields (default: from the x field of each input)"
    )
    parser.add_argument(
        "--save-index",
        action="store_true",
        help="Also write <stem>_index.npy with the source index of every pixel"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> ProjectionConfig:
    """Combine the YAML config (if any) with command-line overrides."""
    base = ProjectionConfig.from_yaml(args.config) if args.config else ProjectionConfig()
    settings = base.to_dict()
    overrides = {
        "height": args.height,
        "width": args.width,
        "focal_azimuth": args.focal_azimuth,
        "focal_elevation": args.focal_elevation,
        "center_azimuth": args.center_azimuth,
        "center_elevation": args.center_elevation,
        "keep": args.keep,
        "azimuth_only": args.azimuth_only,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})
    return ProjectionConfig.from_dict(settings)


def run(
    inputs: List[Path],
    output_dir: Path,
    config: ProjectionConfig,
    dtype: Optional[type] = None,
    save_index: bool = False,
) -> Dict:
    """Project every input file and write the results.

    Inputs that cannot be loaded or violate the organized cloud
    contract are logged and skipped.

    Parameters
    ----------
    inputs : list of Path
        Structured `.npy` files.
    output_dir : Path
        Created if missing.
    config : ProjectionConfig
        Projection settings shared by all inputs.
    dtype : numpy dtype, optional
        Coordinate type.  If None it is taken from the ``x`` field of
        each input.
    save_index : bool, optional
        Also write the source index map of every input.

    Returns
    -------
    dict
        Summary with the files written, the files that failed and the
        summed `ProjectionStats`.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: List[str] = []
    failed: List[str] = []
    total = ProjectionStats()

    for path in tqdm(inputs, desc="Projecting", unit="cloud", disable=len(inputs) < 2):
        try:
            points = np.load(path, allow_pickle=False)
        except (OSError, EOFError, ValueError) as exc:
            logger.error("Skipping %s: cannot load: %s", path, exc)
            failed.append(str(path))
            continue

        # Covers InvalidCloudShapeError, a ValueError subclass
        try:
            cloud = OrganizedCloud.from_structured(points)
            cloud_dtype = dtype
            if cloud_dtype is None:
                cloud_dtype = cloud.coordinate_dtype()
            if cloud_dtype is None:
                cloud_dtype = np.float32
            projection = Projection(config, dtype=cloud_dtype)
            image = projection.project(cloud)
        except ValueError as exc:
            logger.error("Skipping %s: %s", path, exc)
            failed.append(str(path))
            continue

        np.save(output_dir / f"{path.stem}.npy", image.cloud.to_structured())
        if save_index:
            np.save(output_dir / f"{path.stem}_index.npy", image.source_index)
        written.append(str(path))
        total = total + image.stats
        logger.debug("%s: %s", path.name, image.stats)

    return {
        "written": written,
        "failed": failed,
        "stats": {
            "invalid": total.invalid,
            "out_of_window": total.out_of_window,
            "collisions": total.collisions,
            "kept": total.kept,
        },
    }


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    config = config_from_args(args)
    dtype = _DTYPES[args.dtype] if args.dtype else None
    output_dir = Path(args.output_dir)
    inputs = [Path(p) for p in args.input]
    logger.info("Projecting %d cloud(s) with %s", len(inputs), config.to_dict())

    summary = run(inputs, output_dir, config, dtype=dtype, save_index=args.save_index)

    meta = {
        "created": datetime.datetime.now().isoformat(timespec="seconds"),
        "config": config.to_dict(),
        "dtype": args.dtype or "auto",
        "frames_requested": len(inputs),
        "frames_written": len(summary["written"]),
        "failed": summary["failed"],
        "stats": summary["stats"],
    }
    (output_dir / "meta.json").write_text(json.dumps(meta, indent=2))

    logger.info(
        "Done: wrote %d/%d to %s (kept=%d collisions=%d out_of_window=%d invalid=%d)",
        len(summary["written"]), len(inputs), output_dir,
        summary["stats"]["kept"], summary["stats"]["collisions"],
        summary["stats"]["out_of_window"], summary["stats"]["invalid"],
    )
    return 1 if summary["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
