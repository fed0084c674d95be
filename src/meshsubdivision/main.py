"""
Application Entry Point
=======================
Loads a mesh, subdivides it and reports, exports or shows the result.

Usage:
    $ meshsubdivision assets/icosahedron.obj -n 3 -o smooth.obj
    $ meshsubdivision --preset open_cube --triangulate -n 2 --show
"""
from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from meshsubdivision.config import MAX_SUBDIVISION_LEVEL, PRESET_MODELS
from meshsubdivision.controller.levels import SubdivisionLevels
from meshsubdivision.controller.subdivision import list_schemes
from meshsubdivision.logging_config import LOG_LEVELS, setup_logging
from meshsubdivision.model.errors import MeshError
from meshsubdivision.model.io import ObjIO

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meshsubdivision",
        description="Subdivide a triangle mesh with Loop subdivision.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("input", nargs="?", help="Mesh file to load (OBJ or another surface format meshio reads).")
    source.add_argument("--preset", choices=sorted(PRESET_MODELS), help="Load one of the bundled models.")

    parser.add_argument(
        "-n", "--levels", type=int, default=1,
        help=f"Number of subdivision steps (0..{MAX_SUBDIVISION_LEVEL}).",
    )
    parser.add_argument("-s", "--scheme", default="loop", choices=list_schemes(), help="Subdivision scheme.")
    parser.add_argument("-o", "--output", help="Write the finest level (.obj, .vtk, .vtp, .ply, .stl).")
    parser.add_argument("--triangulate", action="store_true", help="Fan-triangulate polygons on import.")
    parser.add_argument("--stats", action="store_true", help="Print counts for every level.")
    parser.add_argument("--show", action="store_true", help="Open the interactive PyVista viewer.")
    parser.add_argument("--log-level", default="WARNING", type=str.upper, choices=LOG_LEVELS)
    parser.add_argument("--log-file", help="Also write the log to this file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    path = PRESET_MODELS[args.preset] if args.preset else args.input

    try:
        base_mesh = ObjIO.load_mesh(path, triangulate=args.triangulate)
        levels = SubdivisionLevels(base_mesh, scheme=args.scheme)
        finest = levels.level(args.levels)
    except FileNotFoundError as e:
        logger.error(f"Input file not found: {e.filename}")
        return 1
    except MeshError as e:
        logger.error(f"Subdivision of '{path}' failed: {e}")
        return 1
    except ValueError as e:
        logger.error(str(e))
        return 1

    if args.stats:
        for k in range(len(levels)):
            print(f"level {k}: {levels[k].stats()}")

    if args.output:
        try:
            ObjIO.export_mesh(finest, args.output)
        except ValueError as e:
            logger.error(f"Export failed: {e}")
            return 1

    if args.show:
        from meshsubdivision.view.viewer import SubdivisionViewer

        SubdivisionViewer(levels).show(level=args.levels)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
