"""
Claim token generation.

A token only has to be unique among claim attempts racing at the same
moment, across threads, processes and hosts. It carries no security meaning.
"""

import hashlib
import itertools
import os
import socket
import threading
import time


class TokenGenerator:
    """
    Produces unique 40-character claim tokens.

    Each token is the SHA-1 digest of the current time, the process id, the
    host name and a per-generator counter, so repeated calls from the same
    process within one clock tick still differ.
    """

    def __init__(self, hostname: str | None = None):
        """
        Initialize the generator.

        Args:
            hostname: Host identity mixed into tokens. Defaults to this host.
        """
        self._hostname = hostname or socket.gethostname()
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def _next_count(self) -> int:
        with self._lock:
            return next(self._counter)

    def generate(self) -> str:
        """
        Generate a fresh claim token.

        Returns:
            A 40-character lowercase hex string.
        """
        digest = hashlib.sha1()
        digest.update(str(time.time_ns()).encode())
        digest.update(str(os.getpid()).encode())
        digest.update(self._hostname.encode())
        digest.update(str(self._next_count()).encode())
        return digest.hexdigest()

    __call__ = generate


# Process-scoped default instance
_generator: TokenGenerator | None = None


def get_token_generator() -> TokenGenerator:
    """
    Get the process-wide token generator.

    Returns:
        TokenGenerator: The shared generator instance.
    """
    global _generator
    if _generator is None:
        _generator = TokenGenerator()
    return _generator
