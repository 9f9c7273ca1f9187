"""Exception types for webttfb."""


class WebTTFBError(Exception):
    """Base class for all webttfb errors."""


class ConfigurationError(WebTTFBError):
    """Invalid run setup (empty vantage directory, bad domain, ...).

    Raised before any probe is dispatched.
    """


class ProbeFailure(WebTTFBError):
    """A single probe could not produce a measurement.

    Non-fatal: the orchestrator records it in the error log and keeps a
    zero-valued placeholder result for the vantage point.
    """

    def __init__(self, vantage_id: str, reason: str):
        super().__init__(f"{vantage_id}: {reason}")
        self.vantage_id = vantage_id
        self.reason = reason
