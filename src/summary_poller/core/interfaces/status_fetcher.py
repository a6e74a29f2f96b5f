from abc import ABC, abstractmethod

from summary_poller.core.models.status import StatusRecord


class StatusFetcherPort(ABC):
    """Reads the current summary status for a poll key.

    Normal conditions, including "no summary process for this key", must be
    returned as a StatusRecord (`idle`). Only transport or deserialization
    failures raise, preferably as `StatusFetchError`.
    """

    @abstractmethod
    async def fetch(self, key: str) -> StatusRecord:
        pass
