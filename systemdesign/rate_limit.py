"""Leaky-bucket and token-bucket rate limiters with simulations."""

from __future__ import annotations

import argparse
import random
import threading
import time
from collections import deque
from collections.abc import Callable


def _validate(capacity: int, rate: int, rate_name: str) -> None:
    if capacity < 0:
        raise ValueError("capacity must not be negative")
    if rate <= 0:
        raise ValueError(f"{rate_name} must be positive")


class _Ticker:
    """Calls a function at a fixed interval on a daemon thread until stopped."""

    def __init__(self, interval: float, action: Callable[[], object]) -> None:
        self._interval = interval
        self._action = action
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            self._action()

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not threading.current_thread():
            self._thread.join()


class LeakyBucket:
    """A bounded queue drained at a constant rate."""

    def __init__(self, capacity: int, leak_rate: int, autostart: bool = True) -> None:
        _validate(capacity, leak_rate, "leak_rate")
        self.capacity = capacity
        self.leak_rate = leak_rate
        self._queue: deque[int] = deque()
        self._lock = threading.Lock()
        self._ticker = _Ticker(1 / leak_rate, self.leak) if autostart else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def add_packet(self, packet_id: int) -> bool:
        """Queue a packet; return False if the bucket is full."""
        with self._lock:
            if len(self._queue) >= self.capacity:
                print(f" [LeakyBucket] Packet {packet_id} discarded. Bucket queue is full!")
                return False
            self._queue.append(packet_id)
            print(
                f" [LeakyBucket] Packet {packet_id} added to queue. "
                f"Queue size: {len(self._queue)}/{self.capacity}"
            )
            return True

    def leak(self) -> int | None:
        """Process one queued packet, if any, and return its id."""
        with self._lock:
            if not self._queue:
                return None
            packet_id = self._queue.popleft()
            print(
                f" [LeakyBucket] Packet {packet_id} processed. "
                f"Queue size: {len(self._queue)}/{self.capacity}"
            )
            return packet_id

    def stop(self) -> None:
        """Stop the background leaking."""
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None


class TokenBucket:
    """A token bucket that sends queued packets while tokens are available."""

    def __init__(
        self,
        capacity: int,
        token_rate: int,
        queue_capacity: int,
        clock: Callable[[], float] = time.monotonic,
        autostart: bool = True,
    ) -> None:
        _validate(capacity, token_rate, "token_rate")
        if queue_capacity < 0:
            raise ValueError("queue_capacity must not be negative")
        self.capacity = capacity
        self.token_rate = token_rate
        self.queue_capacity = queue_capacity
        self.tokens = capacity
        self._clock = clock
        self.last_refill = clock()
        self._queue: deque[int] = deque()
        self._lock = threading.Lock()
        self._ticker = _Ticker(1 / token_rate, self.process_one) if autostart else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def _refill(self) -> None:
        now = self._clock()
        to_add = int((now - self.last_refill) * self.token_rate)
        if to_add > 0:
            self.tokens = min(self.tokens + to_add, self.capacity)
            self.last_refill = now

    def refill(self) -> int:
        """Add the tokens earned since the last refill and return the token count."""
        with self._lock:
            self._refill()
            return self.tokens

    def add_packet(self, packet_id: int) -> bool:
        """Queue a packet; return False if the queue is full."""
        with self._lock:
            if len(self._queue) >= self.queue_capacity:
                print(f" [TokenBucket] Packet {packet_id} discarded. Queue is full!")
                return False
            self._queue.append(packet_id)
            print(
                f" [TokenBucket] Packet {packet_id} added to queue. "
                f"Queue size: {len(self._queue)}/{self.queue_capacity}"
            )
            return True

    def process_one(self) -> int | None:
        """Refill, then take one queued packet and send it if a token is available.

        Returns the id of the packet sent. A packet taken while no token is
        available is dropped and None is returned.
        """
        with self._lock:
            self._refill()
            if not self._queue:
                return None
            packet_id = self._queue.popleft()
            if self.tokens <= 0:
                return None
            self.tokens -= 1
            print(
                f" [TokenBucket] Packet {packet_id} sent! "
                f"Tokens remaining: {self.tokens}/{self.capacity}"
            )
            return packet_id

    def stop(self) -> None:
        """Stop the background processor."""
        if self._ticker is not None:
            self._ticker.stop()
            self._ticker = None


def _send_bursts(add_packet: Callable[[int], bool]) -> None:
    for i in range(20):
        if i % 2 == 0:
            for j in range(random.randint(1, 4)):
                add_packet(i * 10 + j)
        time.sleep(0.5)


def simulate_leaky_bucket() -> None:
    """Feed bursts of packets into a leaky bucket (capacity 5, 2 packets/s)."""
    print("--- Simulating Leaky Bucket ---")
    bucket = LeakyBucket(5, 2)
    try:
        _send_bursts(bucket.add_packet)
        time.sleep(2)
    finally:
        bucket.stop()
    print("--- Leaky Bucket simulation finished ---")


def simulate_token_bucket() -> None:
    """Feed bursts of packets into a token bucket (5 tokens, 2/s, queue of 10)."""
    print("--- Simulating Token Bucket ---")
    bucket = TokenBucket(5, 2, 10)
    try:
        _send_bursts(bucket.add_packet)
        time.sleep(4)
    finally:
        bucket.stop()
    print("--- Token Bucket simulation finished ---")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Rate limiting simulations.")
    parser.parse_args(argv)
    simulate_leaky_bucket()
    print()
    simulate_token_bucket()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())