"""Error kinds raised by the generator, the analysis engine and the exporters."""


class LineAnalyticsError(Exception):
    """Base class for all failures surfaced to the caller."""


class InvalidArgument(LineAnalyticsError, ValueError):
    """Bad record count, seed or tree count."""


class InsufficientData(LineAnalyticsError):
    """Too few records, or no variance to model."""


class MalformedInput(LineAnalyticsError):
    """A table is missing required columns or has the wrong column types."""
