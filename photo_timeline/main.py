"""Main application module for the photo timeline."""

import asyncio
import logging
import sys
from pathlib import Path

from .constants import Constants
from .exceptions import ConfigurationError, FileOperationError
from .config import ConfigurationManager
from .export import CSVExporter, KMLExporter
from .extractor import MetadataExtractor
from .grouping import DayLocationResolver, TemporalGrouper
from .metadata import ExifMetadataReader
from .session import TimelineSession
from .surface import KMLSurface
from .synchronizer import MapSynchronizer
from .types import ApplicationConfig
from .utils import FileScanner, LoggingSetup


class TimelineWorkflow:
    """Orchestrates scanning, the timeline session and the exports."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.scanner = FileScanner(logger)
        self.csv_exporter = CSVExporter(logger)
        self.kml_exporter = KMLExporter(logger)

    async def run(self, app_config: ApplicationConfig) -> int:
        """Run the workflow and return the process exit code."""
        root_path = self._validate_directories(app_config)
        if isinstance(root_path, int):
            return root_path
        files = list(self.scanner.scan(str(root_path), app_config.directory.recursive))
        self.logger.info(f"Found {len(files)} JPEG files in {root_path}")

        surface = KMLSurface(self.logger, app_config.map.width, app_config.map.height)
        synchronizer = MapSynchronizer(surface, self.logger, app_config.map)
        session = TimelineSession(
            MetadataExtractor(ExifMetadataReader(self.logger), self.logger, app_config.extraction),
            TemporalGrouper(self.logger),
            self.logger,
            synchronizer=synchronizer,
            location_resolver=DayLocationResolver(self.logger) if app_config.output.geocode_days else None,
        )

        try:
            await synchronizer.start()
            result = await session.submit_files(files)
            if result is None:
                return Constants.ErrorCodes.GENERAL_ERROR

            for skipped in result.skipped:
                self.logger.warning(f"Skipped {skipped.file.name}: {skipped.reason.value}")
            self._log_days(session)

            if not result.points:
                self.logger.warning("No geotagged photos found")
                return Constants.ErrorCodes.NO_PHOTOS_FOUND

            if not await synchronizer.wait_ready():
                self.logger.error("Map surface unavailable; no overlay written")
                return Constants.ErrorCodes.SURFACE_UNAVAILABLE
            await synchronizer.settle()

            self.kml_exporter.export_surface(surface, app_config.output.kml_path, root_path.name)
            if app_config.output.csv_path:
                self.csv_exporter.export_timeline(session.days, app_config.output.csv_path)
                csv_path = Path(app_config.output.csv_path)
                self.csv_exporter.export_skipped(
                    result.skipped, csv_path.with_name(f"{csv_path.stem}_skipped{csv_path.suffix}")
                )
        finally:
            session.close()

        return Constants.ErrorCodes.SUCCESS

    def _validate_directories(self, app_config: ApplicationConfig) -> Path | int:
        """Return the root path, or the exit code explaining why there is none."""
        if not app_config.directory.root:
            self.logger.error("Root directory not specified")
            return Constants.ErrorCodes.NO_ROOT_DIRECTORY

        root_path = Path(app_config.directory.root)
        if not root_path.exists():
            self.logger.error(f"Root directory does not exist: {root_path}")
            return Constants.ErrorCodes.ROOT_DIRECTORY_NOT_FOUND
        return root_path

    def _log_days(self, session: TimelineSession) -> None:
        for album in session.days:
            place = f" in {album.location}" if album.location else ""
            self.logger.info(
                f"{album.title}{place}: {len(album.photos)} photos, {album.distance_km:.1f} km"
            )


def main(argv: list[str] | None = None) -> None:
    """Main execution function."""
    logger = LoggingSetup.setup_logging()

    try:
        config_manager = ConfigurationManager(logger)
        app_config = config_manager.parse_arguments_and_config(argv)
        if app_config is None:
            sys.exit(Constants.ErrorCodes.SUCCESS)

        if app_config.output.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        workflow = TimelineWorkflow(logger)
        exit_code = asyncio.run(workflow.run(app_config))

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(Constants.ErrorCodes.INTERRUPTED)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(Constants.ErrorCodes.CONFIGURATION_ERROR)
    except FileOperationError as e:
        logger.error(f"File operation error: {e}")
        sys.exit(Constants.ErrorCodes.FILE_OPERATION_ERROR)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        sys.exit(Constants.ErrorCodes.GENERAL_ERROR)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
