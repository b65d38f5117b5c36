"""Constants and error codes for the photo timeline application."""


class Constants:
    """
    Constants used throughout the photo_timeline application.

    Attributes:
        JPEG_EXTENSIONS (set): Supported JPEG file extensions.
        TIMESTAMP_FIELDS (tuple): Candidate timestamp tags, highest priority first.
        DEFAULT_MAX_CONCURRENCY (int): Files read in parallel during extraction.
        DEFAULT_USER_AGENT (str): User agent string for geocoding requests.
        GEOCODING_TIMEOUT_SECONDS (int): Timeout for geocoding operations in seconds.
        FIT_PADDING (int): Padding in pixels around the fitted camera bounds.
        FIT_DURATION_MS (int): Camera fit animation duration in milliseconds.
        FRAME_INTERVAL_SECONDS (float): Delay between layout measurements.
        MAX_LAYOUT_ATTEMPTS (int): Frames to wait for a non-zero surface size.
        TRACK_SOURCE_ID (str): Source id of the track geometry.
        TRACK_LAYER_ID (str): Layer id of the rendered track line.

    Classes:
        ErrorCodes: Application exit codes indicating various error and success states.
    """

    JPEG_EXTENSIONS = {".jpg", ".jpeg", ".JPG", ".JPEG"}

    TIMESTAMP_FIELDS = (
        "DateTimeOriginal",
        "CreateDate",
        "ModifyDate",
        "OffsetTimeOriginal",
        "DateCreated",
    )

    DEFAULT_MAX_CONCURRENCY = 8
    DEFAULT_USER_AGENT = "geo-photo-timeline"

    # Geocoding timeouts
    GEOCODING_TIMEOUT_SECONDS = 10

    # Map surface
    FIT_PADDING = 80
    FIT_DURATION_MS = 600
    FRAME_INTERVAL_SECONDS = 1 / 60
    MAX_LAYOUT_ATTEMPTS = 600
    DEFAULT_VIEWPORT = (1280, 800)
    INITIAL_CENTER = (0.0, 0.0)
    INITIAL_ZOOM = 1.5
    TRACK_SOURCE_ID = "track"
    TRACK_LAYER_ID = "track-line"
    TRACK_COLOR = "#1976d2"
    TRACK_WIDTH = 3

    # Minimum camera range in meters for a single point
    MIN_CAMERA_RANGE = 500

    class ErrorCodes:
        """
        Integer exit codes used by the command line interface.

        Attributes:
            SUCCESS (int): Operation completed successfully.
            INTERRUPTED (int): Operation was interrupted.
            NO_ROOT_DIRECTORY (int): Root directory was not specified.
            ROOT_DIRECTORY_NOT_FOUND (int): Specified root directory does not exist.
            NO_PHOTOS_FOUND (int): No geotagged photos were found.
            SURFACE_UNAVAILABLE (int): The map surface never became ready.
            FILE_OPERATION_ERROR (int): Error occurred during file operation.
            CONFIGURATION_ERROR (int): Error in application configuration.
            GENERAL_ERROR (int): General or unspecified error.
        """

        SUCCESS = 0
        INTERRUPTED = 1
        NO_ROOT_DIRECTORY = 2
        ROOT_DIRECTORY_NOT_FOUND = 8
        NO_PHOTOS_FOUND = 9
        SURFACE_UNAVAILABLE = 14
        FILE_OPERATION_ERROR = 17
        CONFIGURATION_ERROR = 19
        GENERAL_ERROR = 20
