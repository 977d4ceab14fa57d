#!/usr/bin/env python3
"""
Example usage of the IMS Station Assignment System.

This script demonstrates how the ConfigLoader, logging setup and the station
assignment module fit together against the sample data shipped in data/.
"""

from ims_core.config import ConfigLoader
from ims_core.exceptions import IMSConfigurationError, IMSValidationError
from ims_core.utils import setup_logging, get_logger
from modules.station_assignment.processor import StationAssignmentProcessor


SAMPLE_INCIDENTS = [
    (37.9838, 23.7275, "fire"),
    (37.9420, 23.6465, "coast_guard"),
    (37.9755, 23.7348, "police"),
    (37.9838, 23.7275, "hospital"),
    (38.2466, 21.7346, "fire"),
]


def main():
    """Main function demonstrating the station assignment components."""
    print("IMS Station Assignment System - Demo")
    print("=" * 60)

    print("\n1. Setting up logging...")
    setup_logging(environment="development", log_level="INFO")
    logger = get_logger(__name__)

    print("\n2. Loading configuration...")
    config_loader = ConfigLoader()
    try:
        env_config = config_loader.load_environment_config("development")
        logger.info(f"Configured data sources: {sorted(env_config['data_sources'])}")
    except (IMSConfigurationError, IMSValidationError) as e:
        print(f"Configuration error: {e}")
        return

    processor = StationAssignmentProcessor(config_loader, "development")
    if not processor.validate_configuration():
        print("Station assignment configuration is invalid")
        return

    print("\n3. Assigning sample incidents...")
    engine = processor.initialize()
    for latitude, longitude, agency in SAMPLE_INCIDENTS:
        result = engine.assign_location(latitude, longitude, agency)
        if result is None:
            print(f"   {agency:<12} ({latitude}, {longitude}) -> no station")
        else:
            detail = result.district_name or f"{result.distance_meters:.0f} m"
            print(f"   {agency:<12} ({latitude}, {longitude}) -> {result.station_name} "
                  f"[{result.assignment_method.value}, {detail}]")

    print("\n4. Resolving by station service boundaries...")
    station = processor.find_station_by_boundary(37.95, 23.68)
    print(f"   (37.95, 23.68) -> {station.name if station else 'no station'}")

    print("\n5. Module status...")
    status = processor.get_status()
    print(f"   status={status.status} health_check={status.health_check}")
    cache = status.get_component("lookup_cache")
    print(f"   cache: {cache.details if cache else None}")

    print("\n" + "=" * 60)
    print("Demo completed.")


if __name__ == "__main__":
    main()
