"""Station Assignment Module Entry Point

Command-line interface for the station assignment module:

    python -m modules.station_assignment.main assign --lat 37.99 --lon 23.74 --agency fire
    python -m modules.station_assignment.main boundary --lat 37.95 --lon 23.68
    python -m modules.station_assignment.main batch --environment production --dry-run
"""

import argparse
import json
import sys
from typing import Optional

from ims_core.config import ConfigLoader
from ims_core.exceptions import IMSBaseException
from ims_core.utils import get_logger, setup_logging_from_config
from .processor import StationAssignmentProcessor

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="IMS Station Assignment - Assign incidents to the responsible or nearest station"
    )
    parser.add_argument(
        "--environment",
        choices=["development", "production"],
        default="development",
        help="Environment to run against (default: development)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level"
    )
    parser.add_argument(
        "--config-dir",
        default="config",
        help="Directory containing environment_config.json (default: config)"
    )
    parser.add_argument(
        "--modules-dir",
        default="modules",
        help="Directory containing processing modules (default: modules)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    assign_parser = subparsers.add_parser("assign", help="Assign a single incident location")
    assign_parser.add_argument("--lat", type=float, required=True, help="Incident latitude (WGS84)")
    assign_parser.add_argument("--lon", type=float, required=True, help="Incident longitude (WGS84)")
    assign_parser.add_argument("--agency", required=True,
                               help="Agency type: fire, coastguard, police or hospital")

    boundary_parser = subparsers.add_parser(
        "boundary", help="Find the fire station whose service boundary contains a location"
    )
    boundary_parser.add_argument("--lat", type=float, required=True, help="Latitude (WGS84)")
    boundary_parser.add_argument("--lon", type=float, required=True, help="Longitude (WGS84)")

    batch_parser = subparsers.add_parser("batch", help="Assign every incident in the incidents file")
    batch_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Perform all processing logic without writing the output file"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the station assignment module.

    Args:
        args: Command line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parsed_args = build_parser().parse_args(args)
    config_loader = ConfigLoader(parsed_args.config_dir, parsed_args.modules_dir)

    try:
        env_config = config_loader.load_environment_config(parsed_args.environment)
        setup_logging_from_config(env_config.get("logging", {}), parsed_args.environment, parsed_args.log_level)
        config_loader.validate_environment_variables(parsed_args.environment)
    except IMSBaseException as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    processor = StationAssignmentProcessor(config_loader, parsed_args.environment)

    if parsed_args.command in ("assign", "boundary"):
        try:
            engine = processor.initialize()
        except IMSBaseException as e:
            logger.error(f"Failed to initialize station assignment: {e}")
            return 2

        if parsed_args.command == "boundary":
            station = processor.find_station_by_boundary(parsed_args.lat, parsed_args.lon)
            response = ({"stationId": station.id, "stationName": station.name, "area": station.area}
                        if station else None)
        else:
            result = engine.assign_location(parsed_args.lat, parsed_args.lon, parsed_args.agency)
            response = result.to_response() if result else None

        print(json.dumps(response, indent=2))
        return 0 if response else 1

    result = processor.process(dry_run=parsed_args.dry_run)
    print(json.dumps({
        "success": result.success,
        "records_processed": result.records_processed,
        "assigned_count": result.summary.assigned_count,
        "errors": result.errors,
        "execution_time": round(result.execution_time, 3),
    }, indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
