# wpaudit/errors.py
from typing import Iterable, List, Optional


class WPAuditError(Exception):
    def __init__(self, msg: str = ""):
        super().__init__(msg)


class RelayExhausted(WPAuditError):
    """Every relay failed, or answered with something unusable, for one fetch."""

    def __init__(self, url: str, errors: List[str], statuses: Optional[Iterable[int]] = None):
        self.url = url
        self.errors = list(errors)
        self.statuses = set(statuses or [])
        super().__init__(f"All relays failed for {url}: {', '.join(self.errors) or 'no relay attempted'}")


class ConnectionFailed(WPAuditError):
    pass
