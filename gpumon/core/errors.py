"""Error taxonomy for the sampler."""


class MonitorError(Exception):
    """Base class for all gpumon errors."""


class CollectionError(MonitorError):
    """Metrics query unavailable, empty, or malformed."""


class RenderError(MonitorError):
    """Table formatter failed."""


class AlreadyRunningError(MonitorError):
    """start() called on a running scheduler."""


class PersistenceError(MonitorError):
    """CSV log could not be written."""


class ConfigError(MonitorError):
    """Invalid configuration value."""
