from systemdesign.bloom import BloomFilter
from systemdesign.cuckoo import CuckooFilter
from systemdesign.filter_app import main, warm_up_filters
from systemdesign.userdb import connect_db, create_schema, fetch_ids, seed_database


def test_warm_up_adds_every_id():
    conn = connect_db(":memory:")
    create_schema(conn)
    seed_database(conn, 25)
    bloom = BloomFilter(4096, 5)
    cuckoo = CuckooFilter(256)
    assert warm_up_filters(conn, bloom, cuckoo) == 25
    ids = [user_id.bytes for user_id in fetch_ids(conn)]
    assert all(bloom.test(raw) for raw in ids)
    assert all(cuckoo.lookup(raw) for raw in ids)
    assert len(cuckoo) == 25
    conn.close()


def test_warm_up_empty_database():
    conn = connect_db(":memory:")
    create_schema(conn)
    cuckoo = CuckooFilter(64)
    assert warm_up_filters(conn, BloomFilter(64, 3), cuckoo) == 0
    assert len(cuckoo) == 0
    conn.close()


def test_main_seeds_and_benchmarks(tmp_path, capsys):
    db_path = tmp_path / "users.db"
    code = main(
        [
            "--db", str(db_path),
            "--items", "40",
            "--bits", "2048",
            "--hashes", "3",
            "--cuckoo-capacity", "256",
            "--benchmark-n", "10",
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Benchmark: Deletions (10 items)" in out
    conn = connect_db(str(db_path))
    assert conn.execute("SELECT COUNT(*) FROM users").fetchone()[0] == 40
    conn.close()