import pytest

from systemdesign.consistent_hashing import ConsistentHashing, hash_key, main, verify_keys


def _ring(node_count=4, vnodes=50, users=500):
    ring = ConsistentHashing(vnodes)
    for i in range(node_count):
        ring.add_node(f"node-{i}")
    data = {f"user_{i}": f"data_for_user_{i}" for i in range(users)}
    for key, value in data.items():
        ring.place(key, value)
    return ring, data


def test_hash_key_is_crc32_ieee():
    assert hash_key("") == 0
    assert hash_key("123456789") == 0xCBF43926


def test_get_node_on_empty_ring_raises():
    with pytest.raises(LookupError):
        ConsistentHashing(10).get_node("user_1")


def test_single_node_owns_every_key():
    ring = ConsistentHashing(5)
    ring.add_node("only")
    assert {ring.get_node(f"user_{i}") for i in range(200)} == {"only"}


def test_ring_is_sorted_and_sized():
    ring, _ = _ring(node_count=3, vnodes=20, users=0)
    assert ring.ring == sorted(ring.ring)
    assert len(ring.ring) == 60


def test_placement_is_consistent():
    ring, users = _ring()
    correct, incorrect, problems = verify_keys(ring, users)
    assert (correct, incorrect, problems) == (len(users), 0, [])
    assert sum(ring.node_counts().values()) == len(users)


def test_remove_node_redistributes_all_its_keys():
    ring, users = _ring()
    before = len(ring.nodes["node-2"])
    moves = ring.remove_node("node-2")
    assert "node-2" not in ring.nodes
    assert "node-2" not in moves
    assert sum(moves.values()) == before
    assert verify_keys(ring, users)[:2] == (len(users), 0)


def test_add_node_only_moves_keys_to_new_node():
    ring, users = _ring()
    snapshot = {name: dict(data) for name, data in ring.nodes.items()}
    moves = ring.add_node("node-9")
    assert sum(moves.values()) == len(ring.nodes["node-9"])
    for name, data in snapshot.items():
        assert set(ring.nodes[name]) <= set(data)
    assert verify_keys(ring, users)[:2] == (len(users), 0)


def test_duplicate_add_raises():
    ring, _ = _ring(users=0)
    with pytest.raises(ValueError):
        ring.add_node("node-0")


def test_remove_unknown_raises():
    ring, _ = _ring(users=0)
    with pytest.raises(KeyError):
        ring.remove_node("missing")


def test_verify_detects_misplaced_and_lost_keys():
    ring, users = _ring(users=50)
    key = "user_7"
    owner = ring.get_node(key)
    other = next(name for name in ring.nodes if name != owner)
    ring.nodes[other][key] = ring.nodes[owner].pop(key)
    lost_key = "user_8"
    ring.nodes[ring.get_node(lost_key)].pop(lost_key)
    correct, incorrect, problems = verify_keys(ring, users)
    assert correct == len(users) - 2
    assert incorrect == 2
    assert any("LOST" in p and lost_key in p for p in problems)


def test_format_stats_reports_total():
    ring, users = _ring(users=120)
    report = ring.format_stats()
    assert report.startswith("--- Current Node Status ---")
    assert f"Total Records: {len(users)}" in report
    assert list(ring.node_counts()) == sorted(ring.nodes)


def test_main_small_run_verifies_all_keys(capsys):
    assert main(["--users", "300", "--nodes", "5", "--vnodes", "20"]) == 0
    out = capsys.readouterr().out
    assert "Verification Complete: 300 correct keys, 0 incorrect keys." in out
    assert "Removing node 'node-4'" in out
    assert "Adding node 'node-5'" in out