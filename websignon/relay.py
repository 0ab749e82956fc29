"""
Holds request token secrets between the redirect to the provider and the
callback that comes back from it.

The secret of a request token must never reach the browser, yet the callback
arrives in a separate HTTP request.  A relay keeps one entry per request token
until the callback takes it, or until its time-to-live runs out.
"""
import logging
import threading
import time

from .errors import NotFoundError

logger = logging.getLogger(__name__)

# Seconds a pending secret stays claimable.
DEFAULT_TTL = 600


class SecretRelay(object):
    """
    In-memory relay, shared by every thread of one process.

    :Parameters:
        ttl : `int` | `float`
            Seconds before an unclaimed secret expires.
        clock : `callable`
            Returns the current time in seconds.
    """

    def __init__(self, ttl=DEFAULT_TTL, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._secrets = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._secrets)

    def _sweep(self):
        cutoff = self._clock() - self.ttl
        expired = [
            token
            for token, (_, stored_at) in self._secrets.items()
            if stored_at < cutoff
        ]
        for token in expired:
            del self._secrets[token]
        return len(expired)

    def put(self, token, secret):
        """Stores ``secret`` for ``token``, replacing any previous entry."""
        with self._lock:
            self._sweep()
            self._secrets[token] = (secret, self._clock())

    def take(self, token):
        """
        Removes and returns the secret stored for ``token``.

        Raises :class:`~websignon.errors.NotFoundError` when nothing is stored
        or the entry has expired.
        """
        with self._lock:
            entry = self._secrets.pop(token, None)

        if entry is None:
            raise NotFoundError("No pending secret for request token.")

        secret, stored_at = entry
        if stored_at < self._clock() - self.ttl:
            raise NotFoundError("Pending secret for request token has expired.")

        return secret

    def sweep(self):
        """Drops expired entries and returns how many were dropped."""
        with self._lock:
            swept = self._sweep()
        if swept:
            logger.info("Swept {count} expired secrets.".format(count=swept))
        return swept
