"""Domain exceptions."""


class SentimentSweepError(Exception):
    """Base class for all sweep errors."""


class StoreUnavailable(SentimentSweepError):
    """The time-series store could not be reached or rejected a command."""


class InvalidObservation(SentimentSweepError):
    """An observation cannot be scored (missing, unparsable or zero price)."""


class ConfigDiscoveryEmpty(SentimentSweepError):
    """No worker configuration files were found."""


class RecordParseError(SentimentSweepError):
    """A persisted performance record could not be read or validated."""


class ConfigError(SentimentSweepError):
    """A worker configuration file is missing or invalid."""
