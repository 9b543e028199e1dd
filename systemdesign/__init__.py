"""Working models of system design building blocks: consistent hashing, rate limiters,
Bloom and cuckoo filters, a sharded user API and load-balanced services."""

__version__ = "0.1.0"