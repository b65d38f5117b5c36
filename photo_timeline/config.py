"""Configuration management for the photo timeline application."""

import argparse
import logging
from pathlib import Path

import tomllib

from .constants import Constants
from .exceptions import ConfigurationError, FileOperationError
from .types import (
    ApplicationConfig,
    DirectoryConfig,
    ExtractionConfig,
    MapConfig,
    OutputConfig,
)
from .utils import PathNormalizer

DEFAULT_KML_PATH = "photo_timeline.kml"

SAMPLE_CONFIG = """# Photo Timeline Configuration File
# Save this as photo_timeline.toml in your working directory,
# ~/.config/photo_timeline/config.toml, or ~/.photo_timeline.toml

[directories]
root = "/path/to/photos"   # Folder containing the photos of one trip
recursive = true           # Also read photos in subfolders

[extraction]
max_concurrency = 8        # Files read in parallel

[map]
width = 1280               # Viewport size used to frame the camera
height = 800
padding = 80               # Padding around the fitted track, in pixels
max_layout_attempts = 600  # Frames to wait for the map to be laid out

[output]
output_kml = "photo_timeline.kml"  # Map overlay with track and markers
# csv = "timeline.csv"             # Optional per-photo timeline report
geocode_days = false               # Name each day after its first photo's place
verbose = false
"""


class ConfigurationManager:
    """
    Builds the application configuration from command-line arguments and TOML files.

    Values given explicitly on the command line win; missing ones are filled from the
    first configuration file found, then from built-in defaults.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.path_normalizer = PathNormalizer()

    def parse_arguments_and_config(self, argv: list[str] | None = None) -> ApplicationConfig | None:
        """
        Parse arguments and configuration files into an ApplicationConfig.

        Returns None when a sample configuration was written instead.

        Raises:
            ConfigurationError: If the configuration is invalid. A missing root directory
                is reported by the workflow, not here.
        """
        args = self._create_argument_parser().parse_args(argv)

        if args.create_config:
            self._create_sample_config(args.create_config)
            return None

        config_data = self._load_config_file(args.config)
        if config_data:
            self._merge_config_with_args(config_data, args)

        app_config = ApplicationConfig(
            directory=DirectoryConfig(
                root=self.path_normalizer.normalize_path(args.root),
                recursive=not args.no_recursive,
            ),
            extraction=ExtractionConfig(
                max_concurrency=(
                    args.max_concurrency
                    if args.max_concurrency is not None
                    else Constants.DEFAULT_MAX_CONCURRENCY
                ),
            ),
            map=MapConfig(
                width=args.width,
                height=args.height,
                padding=args.padding,
                max_layout_attempts=args.max_layout_attempts,
            ),
            output=OutputConfig(
                kml_path=args.output_kml or DEFAULT_KML_PATH,
                csv_path=args.csv,
                geocode_days=args.geocode_days,
                verbose=args.verbose,
            ),
        )

        self._validate_configuration(app_config)
        return app_config

    def _create_argument_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser for the command-line interface."""
        parser = argparse.ArgumentParser(
            prog="photo-timeline",
            description="Builds a day-by-day map timeline from the GPS and time metadata of photos.",
            epilog="Examples:\n"
            "  %(prog)s -d ~/Pictures/trip -o trip.kml\n"
            "  %(prog)s -d ~/Pictures/trip --csv trip.csv --geocode-days -v\n"
            "  %(prog)s --create-config  # Create sample config file\n\n"
            "Configuration files (TOML format) are searched in this order:\n"
            "  1. Path specified with --config\n"
            "  2. ./photo_timeline.toml\n"
            "  3. ~/.config/photo_timeline/config.toml\n"
            "  4. ~/.photo_timeline.toml",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "-d",
            "--root",
            action="store",
            help="(required) the <folder> containing the photos to place on the timeline",
        )
        parser.add_argument(
            "--no-recursive",
            action="store_true",
            help="Don't read photos in subfolders",
        )
        parser.add_argument(
            "-o",
            "--output-kml",
            type=str,
            help=f"Output path for the map overlay KML (defaults to {DEFAULT_KML_PATH})",
        )
        parser.add_argument(
            "--csv",
            type=str,
            help="Also write a per-photo timeline report to this CSV file",
        )
        parser.add_argument(
            "--geocode-days",
            action="store_true",
            help="Name each day after the place of its first photo (uses Nominatim)",
        )
        parser.add_argument(
            "-v", "--verbose", action="store_true", help="print additional information"
        )
        parser.add_argument(
            "--max-concurrency",
            type=int,
            help=f"Number of files read in parallel (default {Constants.DEFAULT_MAX_CONCURRENCY})",
        )
        parser.add_argument(
            "--width",
            type=int,
            default=Constants.DEFAULT_VIEWPORT[0],
            help="Map viewport width in pixels",
        )
        parser.add_argument(
            "--height",
            type=int,
            default=Constants.DEFAULT_VIEWPORT[1],
            help="Map viewport height in pixels",
        )
        parser.add_argument(
            "--padding",
            type=int,
            default=Constants.FIT_PADDING,
            help="Padding around the fitted track in pixels",
        )
        parser.add_argument(
            "--max-layout-attempts",
            type=int,
            default=Constants.MAX_LAYOUT_ATTEMPTS,
            help="Frames to wait for the map to be laid out before giving up",
        )
        parser.add_argument(
            "--config",
            type=str,
            help="Path to TOML configuration file (optional)",
        )
        parser.add_argument(
            "--create-config",
            type=str,
            nargs="?",
            const="photo_timeline.toml",
            help="Create a sample configuration file and exit (optionally specify path)",
        )
        return parser

    def _load_config_file(self, config_path: str | Path | None = None) -> dict:
        """
        Load configuration data from the first TOML file found.

        Returns an empty dictionary if no file is found or none can be parsed.
        """
        config_locations = []
        if config_path:
            config_locations.append(Path(config_path))

        config_locations.extend(
            [
                Path.cwd() / "photo_timeline.toml",
                Path.home() / ".config" / "photo_timeline" / "config.toml",
                Path.home() / ".photo_timeline.toml",
            ]
        )

        for config_file in config_locations:
            if config_file.exists():
                try:
                    with open(config_file, "rb") as f:
                        config_data = tomllib.load(f)
                    self.logger.info(f"Loaded configuration from: {config_file}")
                    return config_data
                except (OSError, IOError) as e:
                    self.logger.warning(f"Could not load config file {config_file}: {e}")
                    continue
                except tomllib.TOMLDecodeError as e:
                    self.logger.warning(f"Could not parse config file {config_file}: {e}")
                    continue

        return {}

    def _merge_config_with_args(self, config_data: dict, args: argparse.Namespace) -> None:
        """Fill arguments that were not given on the command line from `config_data`."""
        field_mappings = [
            # (toml_section, arg_name, toml_field, merge_strategy[, default])
            ("directories", "root", "root", "string_not_empty"),
            ("extraction", "max_concurrency", "max_concurrency", "none_check"),
            ("map", "width", "width", "default_value", Constants.DEFAULT_VIEWPORT[0]),
            ("map", "height", "height", "default_value", Constants.DEFAULT_VIEWPORT[1]),
            ("map", "padding", "padding", "default_value", Constants.FIT_PADDING),
            ("map", "max_layout_attempts", "max_layout_attempts", "default_value", Constants.MAX_LAYOUT_ATTEMPTS),
            ("output", "output_kml", "output_kml", "string_not_empty"),
            ("output", "csv", "csv", "string_not_empty"),
            ("output", "geocode_days", "geocode_days", "boolean_false_to_true"),
            ("output", "verbose", "verbose", "boolean_false_to_true"),
        ]

        for mapping in field_mappings:
            self._apply_field_mapping(config_data, args, mapping)

        # recursive = false in the file maps onto --no-recursive
        if not args.no_recursive and config_data.get("directories", {}).get("recursive", True) is False:
            args.no_recursive = True

    def _apply_field_mapping(
        self, config_data: dict, args: argparse.Namespace, mapping: tuple
    ) -> None:
        """
        Apply a single field mapping from the configuration data to the arguments.

        Merge Strategies:
            - "string_not_empty": Sets the argument if it is empty/falsy and config value exists.
            - "none_check": Sets the argument if it is None and config value exists.
            - "default_value": Sets the argument if it still has its default value.
            - "boolean_false_to_true": Sets the argument if it is False and config value is True.
        """
        toml_section, arg_name, toml_field, merge_strategy = mapping[:4]
        section_data = config_data.get(toml_section, {})
        if toml_field not in section_data:
            return

        value = section_data[toml_field]
        current = getattr(args, arg_name, None)
        if merge_strategy == "string_not_empty":
            if not current:
                setattr(args, arg_name, value)
        elif merge_strategy == "none_check":
            if current is None:
                setattr(args, arg_name, value)
        elif merge_strategy == "default_value":
            if current == mapping[4]:
                setattr(args, arg_name, value)
        elif merge_strategy == "boolean_false_to_true":
            if not current and value is True:
                setattr(args, arg_name, True)
        else:
            raise ConfigurationError(f"Unknown merge strategy: {merge_strategy}")

    def _create_sample_config(self, output_path: str | Path | None = None) -> Path:
        """
        Write a sample TOML configuration file.

        Raises:
            FileOperationError: If the configuration file cannot be created.
        """
        if not output_path:
            output_path = Path.cwd() / "photo_timeline.toml"
        else:
            output_path = Path(output_path)

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(SAMPLE_CONFIG)
        except (OSError, IOError) as e:
            raise FileOperationError(f"Could not create config file {output_path}: {e}") from e

        self.logger.info(f"Sample configuration written to {output_path}")
        return output_path

    def _validate_configuration(self, app_config: ApplicationConfig) -> None:
        """Validate the combined configuration."""
        if app_config.extraction.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        if app_config.map.width <= 0 or app_config.map.height <= 0:
            raise ConfigurationError("Map width and height must be positive")
        if app_config.map.padding < 0:
            raise ConfigurationError("Map padding cannot be negative")
        if app_config.map.max_layout_attempts is not None and app_config.map.max_layout_attempts < 1:
            raise ConfigurationError("max_layout_attempts must be at least 1")
