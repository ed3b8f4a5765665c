"""Snowflake-style ID generator for withdrawal request IDs.

Generates monotonically increasing, unique string IDs. The ID doubles as the
payout provider's idempotency reference, so it must never be reused.
Not a full Twitter Snowflake — simplified for a single process per machine_id.
"""

import threading
import time


class SnowflakeIdGenerator:
    """Simple snowflake ID generator.

    Layout (64 bits):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = self._now_ms()
            if now_ms < self._last_ms:
                # Clock moved backwards: keep issuing from the last timestamp
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    now_ms = self._wait_until_after(now_ms)
            else:
                self._sequence = 0

            self._last_ms = now_ms
            value = (
                ((now_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(value)

    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def _wait_until_after(self, last_ms: int) -> int:
        now_ms = self._now_ms()
        while now_ms <= last_ms:
            now_ms = self._now_ms()
        return now_ms


_default_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    """Generate a unique snowflake-style string ID using the module-level default generator."""
    return _default_generator.next_id()
