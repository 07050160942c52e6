import itertools
import os
import threading
import time


OBJECT_ID_PATTERN = r"^[a-fA-F0-9]{24}$"


class ObjectIdGenerator:
    """
    Generator for 12-byte, 24-hex-character record identifiers.

    Layout (big endian):
    - 4 bytes: seconds since the Unix epoch
    - 5 bytes: random value, fixed per process
    - 3 bytes: counter, starting at a random value

    Identifiers are roughly ordered by creation time and unique within a
    process; the random middle part keeps separate processes apart.
    """

    def __init__(self):
        self._process_unique = os.urandom(5)
        self._counter = itertools.count(int.from_bytes(os.urandom(3), "big"))
        self._lock = threading.Lock()
        self._pid = os.getpid()

    def _check_fork(self) -> None:
        # A forked worker must not reuse the parent's random part
        if os.getpid() != self._pid:
            self._pid = os.getpid()
            self._process_unique = os.urandom(5)

    def generate(self) -> str:
        with self._lock:
            self._check_fork()
            counter = next(self._counter) & 0xFFFFFF
            process_unique = self._process_unique

        timestamp = int(time.time()) & 0xFFFFFFFF
        raw = timestamp.to_bytes(4, "big") + process_unique + counter.to_bytes(3, "big")
        return raw.hex()


_generator = ObjectIdGenerator()


def generate_object_id() -> str:
    """Return a new 24-character hexadecimal identifier."""
    return _generator.generate()
