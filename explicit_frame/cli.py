# explicit_frame/cli.py
"""
Command-line entry point.

    explicit-frame -c config.json [-o output_dir] [-v]
    python -m explicit_frame -c config.json
"""

import argparse
import logging
import sys
from typing import List, Optional

from .kernel.solve import MechanismError
from .manager import SimulationManager

logger = logging.getLogger("explicit_frame")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='explicit-frame',
        description='Explicit dynamic analysis of 3D beam frames',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  explicit-frame -c model.json
  explicit-frame -c model.json -o results -v

Dump files (nodal displacements, velocities, forces and a restartable
state JSON) are written to the output directory.
        """
    )

    parser.add_argument(
        '-c', '--config',
        required=True,
        help='Path to the JSON configuration file'
    )

    parser.add_argument(
        '-o', '--output-dir',
        default=None,
        help='Directory for dump files (default: current directory)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log progress and show a progress bar (also enabled by options.verbose)'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        manager = SimulationManager(args.config, output_dir=args.output_dir)
        if args.verbose:
            manager.options.verbose = True
        elif manager.options.verbose:
            logging.getLogger().setLevel(logging.INFO)
        manager.run()
    except (ValueError, MechanismError, OSError) as e:
        # ConfigError is a ValueError
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
