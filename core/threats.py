import logging
import queue
import threading

logger = logging.getLogger(__name__)

_CLOSED = object()


class ThreatCollector(threading.Thread):
    """Accumulates signature names reported during a search.

    The thread is the only writer of the collected list; other threads read it
    through signatures() once the collector has been closed and joined.
    """

    def __init__(self):
        super().__init__(name="threat-collector", daemon=True)
        self._inbox = queue.Queue()
        self._seen = []
        self._closed = False

    def submit(self, name: str):
        if self._closed:
            raise RuntimeError("submit on closed collector")
        self._inbox.put(name)

    def close(self):
        if not self._closed:
            self._closed = True
            self._inbox.put(_CLOSED)

    def run(self):
        while True:
            name = self._inbox.get()
            if name is _CLOSED:
                logger.debug(f"Threat collector closed with {len(self._seen)} reports")
                return
            self._seen.append(name)

    @property
    def reported(self):
        return list(self._seen)

    def signatures(self):
        """Distinct signature names, first-seen order."""
        return list(dict.fromkeys(self._seen))
