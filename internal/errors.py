"""Custom errors with tracking IDs."""

from utils.clock import format_timestamp
from utils.ksuid import generate_ksuid


class SimError(Exception):
    """Base error with unique ID and timestamp for tracking."""

    def __init__(self, message, context=None, cause=None):
        super().__init__(message)
        self.error_id = generate_ksuid()
        self.timestamp = format_timestamp()
        self.context = context or {}
        self.cause = cause

    def __str__(self):
        return f"[{self.error_id}] {super().__str__()}"

    def to_dict(self):
        record = {"id": self.error_id, "timestamp": self.timestamp, "type": type(self).__name__,
                  "msg": super().__str__(), "context": self.context}
        if self.cause is not None:
            record["cause"] = repr(self.cause)
        return record


class ConfigError(SimError):
    """Invalid configuration file or room layout."""

    def __init__(self, message, key=None, **kwargs):
        context = kwargs.pop("context", {})
        if key:
            context["key"] = key
        super().__init__(message, context=context, **kwargs)


class BusError(SimError):
    """Event bus errors (subscribe/publish failures)."""

    def __init__(self, message, subscriber_name=None, **kwargs):
        context = kwargs.pop("context", {})
        if subscriber_name:
            context["subscriber_name"] = subscriber_name
        super().__init__(message, context=context, **kwargs)


class HealthCheckError(SimError):
    """Health check registration failures."""

    def __init__(self, message, component=None, **kwargs):
        context = kwargs.pop("context", {})
        if component:
            context["component"] = component
        super().__init__(message, context=context, **kwargs)
