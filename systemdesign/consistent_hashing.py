"""Consistent hashing ring with virtual nodes and in-memory key storage."""

from __future__ import annotations

import argparse
import bisect
import zlib
from collections import Counter
from collections.abc import Mapping

_RULE = "----------------------------"


def hash_key(key: str) -> int:
    """Return the unsigned 32-bit CRC-32 (IEEE) of a string key."""
    return zlib.crc32(key.encode("utf-8")) & 0xFFFFFFFF


def _vnode_hashes(node_name: str, vnodes: int) -> list[int]:
    return [hash_key(f"{node_name}#{i}") for i in range(vnodes)]


class ConsistentHashing:
    """A hash ring that owns per-node key/value stores and rebalances them."""

    def __init__(self, vnodes: int) -> None:
        self.vnodes = vnodes
        self.ring: list[int] = []
        self.hash_map: dict[int, str] = {}
        self.nodes: dict[str, dict[str, str]] = {}

    def get_node(self, key: str) -> str:
        """Return the node responsible for ``key``."""
        if not self.ring:
            raise LookupError("no nodes in the ring")
        idx = bisect.bisect_left(self.ring, hash_key(key))
        if idx == len(self.ring):
            idx = 0
        return self.hash_map[self.ring[idx]]

    def place(self, key: str, value: str) -> str:
        """Store ``key`` on the node that owns it and return that node's name."""
        node = self.get_node(key)
        self.nodes[node][key] = value
        return node

    def add_node(self, node_name: str) -> dict[str, int]:
        """Add a node and move to it the keys it now owns.

        Returns the number of keys moved from each source node.
        """
        if node_name in self.nodes:
            raise ValueError(f"node '{node_name}' already exists")

        self.nodes[node_name] = {}
        for h in _vnode_hashes(node_name, self.vnodes):
            self.ring.append(h)
            self.hash_map[h] = node_name
        self.ring.sort()

        target = self.nodes[node_name]
        moves: Counter[str] = Counter()
        for source, data in self.nodes.items():
            if source == node_name:
                continue
            keys = [key for key in data if self.get_node(key) == node_name]
            for key in keys:
                target[key] = data.pop(key)
            if keys:
                moves[source] = len(keys)
        return dict(moves)

    def remove_node(self, node_name: str) -> dict[str, int]:
        """Remove a node and hand its keys to their new owners.

        Returns the number of keys moved to each destination node.
        """
        if node_name not in self.nodes:
            raise KeyError(f"node '{node_name}' not found")

        to_remove = set(_vnode_hashes(node_name, self.vnodes))
        for h in to_remove:
            self.hash_map.pop(h, None)
        self.ring = [h for h in self.ring if h not in to_remove]

        data = self.nodes.pop(node_name)
        moves: Counter[str] = Counter()
        for key, value in data.items():
            moves[self.place(key, value)] += 1
        return dict(moves)

    def node_counts(self) -> dict[str, int]:
        """Return the number of records on each node, ordered by node name."""
        return {name: len(self.nodes[name]) for name in sorted(self.nodes)}

    def format_stats(self) -> str:
        """Render the per-node record counts as a status report."""
        counts = self.node_counts()
        lines = ["--- Current Node Status ---"]
        lines.extend(f"Node {name:<8}: {count} records" for name, count in counts.items())
        lines.append(_RULE)
        lines.append(f"Total Records: {sum(counts.values())}")
        lines.append(_RULE)
        return "\n".join(lines)


def verify_keys(
    ring: ConsistentHashing, users: Mapping[str, str]
) -> tuple[int, int, list[str]]:
    """Check that every user key lives on the node the ring assigns it to.

    Returns the number of correct keys, incorrect keys and a message per problem.
    """
    actual = {key: node for node, data in ring.nodes.items() for key in data}
    correct = 0
    problems: list[str] = []
    for key in users:
        expected = ring.get_node(key)
        found = actual.get(key)
        if found is None:
            problems.append(f"FATAL ERROR! Key '{key}' was LOST and not found on any node.")
        elif found == expected:
            correct += 1
        else:
            problems.append(f"Error! Key '{key}' should be on '{expected}', but is on '{found}'.")
    return correct, len(problems), problems


def _print_moves(moves: Mapping[str, int], arrow: str) -> None:
    for node, count in moves.items():
        print(f"  -> {arrow} '{node}': {count} records")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Consistent hashing rebalancing demo.")
    parser.add_argument("--users", type=int, default=1_000_000)
    parser.add_argument("--nodes", type=int, default=10)
    parser.add_argument("--vnodes", type=int, default=1000)
    args = parser.parse_args(argv)
    if args.nodes < 2:
        parser.error("--nodes must be at least 2")

    print(f"📝 Creating {args.users} user records...")
    users = {f"user_{i}": f"data_for_user_{i}" for i in range(args.users)}

    ring = ConsistentHashing(args.vnodes)
    print(
        f"⚙️  Adding {args.nodes} initial nodes to the ring "
        f"(with {args.vnodes} VNodes each)..."
    )
    for i in range(args.nodes):
        ring.add_node(f"node-{i}")
    print("Nodes added.")

    print("\n🗺️  Distributing initial records to nodes...")
    for key, value in users.items():
        ring.place(key, value)
    print("\n" + ring.format_stats())

    removed = f"node-{min(4, args.nodes - 1)}"
    print(f"\nRemoving node '{removed}' and redistributing its data...")
    moves = ring.remove_node(removed)
    print(f"✅ {sum(moves.values())} records were moved from node '{removed}'.")
    _print_moves(moves, "To")
    print("\n" + ring.format_stats())

    added = f"node-{args.nodes}"
    print(f"\n✨ Adding node '{added}' and redistributing data...")
    moves = ring.add_node(added)
    print(f"✅ {sum(moves.values())} records were moved to the new node '{added}'.")
    _print_moves(moves, "From")
    print("\n" + ring.format_stats())

    print("\n🔎 Verifying the location of all keys...")
    correct, incorrect, problems = verify_keys(ring, users)
    for problem in problems:
        print(f"  -> {problem}")
    print(_RULE)
    print(f"Verification Complete: {correct} correct keys, {incorrect} incorrect keys.")
    print(_RULE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())