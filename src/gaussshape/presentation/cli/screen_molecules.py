"""Command-line interface for Gaussian shape screening."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ...core.config import AlignmentConfig, load_parameter_files
from ...core.exceptions import GaussShapeError
from ...core.services.alignment_service import AlignmentService
from ...core.services.screening_service import ScreeningService
from ...infrastructure.adapters.molecule_factory import MoleculeFactory
from ...infrastructure.repositories.molecule_repository import MoleculeRepository

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure logging."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def setup_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser."""
    parser = argparse.ArgumentParser(
        description="Screen a molecule database by Gaussian shape overlap with query molecules"
    )
    parser.add_argument("query", help="Query molecule file (SDF, MOL, MOL2 or PDB)")
    parser.add_argument("database", help="Database molecule file (SDF, MOL, MOL2 or PDB)")
    parser.add_argument("-o", "--output", required=True, help="Output report file")
    parser.add_argument(
        "--param-file",
        action="append",
        default=[],
        help="Parameter file with KEY = VALUE lines; may be repeated",
    )
    parser.add_argument(
        "--db-range",
        nargs=2,
        type=int,
        metavar=("START", "END"),
        help="Index range of database molecules to screen (inclusive)",
    )
    parser.add_argument(
        "--db-hydrogens",
        action="store_true",
        help="Keep hydrogens of database molecules",
    )
    parser.add_argument("--seed", type=int, help="Random seed for initial simplices")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    parser.add_argument("--log-file", help="Also write the log to this file")
    return parser


def run(args: argparse.Namespace) -> int:
    """Run the screening described by parsed arguments."""
    config = load_parameter_files(args.param_file) if args.param_file else AlignmentConfig()
    if args.seed is not None:
        config = AlignmentConfig.from_parameters({"RANDOM_SEED": args.seed}, base=config)

    query_repository = MoleculeRepository(
        Path(args.query).parent, MoleculeFactory(include_hydrogens=True)
    )
    database_repository = MoleculeRepository(
        Path(args.database).parent, MoleculeFactory(include_hydrogens=args.db_hydrogens)
    )

    queries = query_repository.load(args.query)
    database = database_repository.load(args.database)
    logger.info(f"Loaded {len(queries)} queries and {len(database)} database molecules")

    start, end = args.db_range if args.db_range else (0, None)
    service = ScreeningService(AlignmentService(config))
    with open(args.output, "w") as stream:
        records = service.screen_all(
            queries, database, stream, start=start, end=end, progress=args.progress
        )
    logger.info(f"Wrote {len(records)} results to {args.output}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for shape screening CLI."""
    parser = setup_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.log_file)

    try:
        return run(args)
    except (GaussShapeError, FileNotFoundError) as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
