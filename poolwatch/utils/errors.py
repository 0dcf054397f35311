class CollectorError(Exception):
    """Base class for every failure raised inside the collector."""


class SourceUnavailable(CollectorError):
    """The pool list could not be fetched or had no `pools` array."""


class AdapterFetchFailure(CollectorError):
    """One upstream sub-request failed; swallowed at the adapter boundary."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ChainNodeError(CollectorError):
    """The chain node JSON-RPC call failed or answered with an error."""


class PersistenceFailure(CollectorError):
    """A write to the persistence backend failed (already rolled back)."""


class CacheUnavailable(CollectorError):
    """The shared pool-list cache could not be read or written."""
