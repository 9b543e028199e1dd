# systemdesign

Working models of common system design building blocks, each small enough to
read in one sitting and complete enough to run:

- **Consistent hashing** with virtual nodes (`systemdesign.consistent_hashing`),
  including moving records when a node joins or leaves the ring.
- **Rate limiting** with a leaky bucket and a token bucket
  (`systemdesign.rate_limit`).
- **Probabilistic membership** with a Bloom filter (`systemdesign.bloom`,
  double hashing over MurmurHash3 and FNV-1a from `systemdesign.hashing`) and a
  cuckoo filter that supports deletion (`systemdesign.cuckoo`), plus a
  benchmark against plain lookups in a SQLite users table
  (`systemdesign.userdb`, `systemdesign.filter_benchmark`,
  `systemdesign.filter_app`).
- **Database sharding**: an HTTP API for users spread over several MongoDB
  shards by an FNV-1a hash of the user id (`systemdesign.sharding`,
  `systemdesign.sharding_api`), and a client that exercises it
  (`systemdesign.shard_client`).
- **Load balancing**: a controller service (`systemdesign.controller_api`) that
  forwards to a repository service (`systemdesign.repository_api`) behind a
  load balancer.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

| Command | What it does |
| --- | --- |
| `systemdesign-consistent-hashing` | Spreads user records over nodes on a ring, removes one node, adds another, and checks that every key sits where the ring says it should. Options: `--users` (default 1000000), `--nodes` (default 10, at least 2), `--vnodes` (default 1000). |
| `systemdesign-rate-limit` | Sends random bursts of packets through a leaky bucket (capacity 5, 2 packets/s) and then a token bucket (5 tokens, 2 tokens/s, queue of 10), printing what is queued, processed and dropped. |
| `systemdesign-filter-bench` | Creates and seeds a SQLite users table, warms up a Bloom filter and a cuckoo filter with every id, and benchmarks lookups of missing and present users and cuckoo deletions. Options: `--db` (default `users.db`), `--items` (default 20000000), `--bits`, `--hashes`, `--cuckoo-capacity`, `--benchmark-n` (default 100000). |
| `systemdesign-sharding-api` | Connects to and pings every shard, then serves the sharded user API. Options: `--host`, `--port` (default 8080), `--uri-template` (default `mongodb://mongo-shard-{}:27017`), `--shards` (default 4). Exits with status 1 if a shard cannot be reached. |
| `systemdesign-shard-client` | Inserts users through the sharded API (50 requests at a time), counts documents on shards at `mongodb://localhost:27017` upwards, and checks create, read, update, delete and not-found answers. Options: `--api-url` (default `http://localhost:8080`), `--users` (default 1000), `--shards` (default 4). |
| `systemdesign-controller-api` | Serves `/data` and forwards each request to the repository service, passing on its status, body and content type and adding an `X-Controller-Node-ID` header with the host name. Answers 503 if the repository cannot be reached. Options: `--host`, `--port` (default 8000), `--repository-url` (default `http://haproxy:8081/data`). |
| `systemdesign-repository-api` | Serves `/data` with a random row from the `messages` table of the database named by the `DATABASE_URL` environment variable, as `{"data_message": ..., "repository_node_id": ...}`, after a random delay. Answers 500 if the query fails. Options: `--host`, `--port` (default 8001), `--max-wait-ms` (default 10000). Exits with status 1 if `DATABASE_URL` is not set. |

The sharded user API offers:

| Method | Path | Result |
| --- | --- | --- |
| `POST` | `/users` | 201 with the new user, id assigned by the server; 400 for a body that is not a JSON object of strings |
| `GET` | `/users/<id>` | the user, 400 for a malformed id, or 404 |
| `GET` | `/users/name/<name>` | every user with that name, gathered from all shards in parallel, or 404 |
| `PUT` | `/users/<id>` | sets `name` and `data`; 204, or 404 if there is no such user |
| `DELETE` | `/users/<id>` | 204, or 404 if there is no such user |

`create_app(shard_manager)` builds this Flask app around any `ShardManager`;
`ShardManager.connect()` opens the MongoDB connections, and
`shard_index(user_id, num_shards)` gives the shard a user id belongs to.

## Using the library

Consistent hashing:

```python
from systemdesign.consistent_hashing import ConsistentHashing, verify_keys

ring = ConsistentHashing(100)
ring.add_node("node-0")
ring.add_node("node-1")
ring.place("user_1", "data_for_user_1")
print(ring.get_node("user_1"))
moved_from = ring.add_node("node-2")    # {source node: records moved}
moved_to = ring.remove_node("node-0")   # {destination node: records moved}
print(ring.node_counts())
print(ring.format_stats())
correct, incorrect, problems = verify_keys(ring, {"user_1": "data_for_user_1"})
```

`get_node` on an empty ring raises `LookupError`; adding a node that is
already on the ring raises `ValueError`; removing one that is not raises
`KeyError`.

Bloom and cuckoo filters:

```python
from systemdesign.bloom import BloomFilter
from systemdesign.cuckoo import CuckooFilter

bloom = BloomFilter(191_701_179, 7)
bloom.add(b"some id")
assert b"some id" in bloom

cuckoo = CuckooFilter(1 << 20)
cuckoo.insert(b"some id")
assert cuckoo.lookup(b"some id")
cuckoo.delete(b"some id")
```

A Bloom filter never answers "no" for something it has seen, but may answer
"yes" for something it has not. The cuckoo filter uses buckets of four 8-bit
fingerprints, with a power-of-two number of buckets; `insert` returns `False`
when the filter is too full to place an item, and `delete` returns `False`
when the item is not found. `systemdesign.hashing` exposes the hash functions
themselves as `murmur3_64(data, seed=0)` and `fnv1a_64(data)`.

Rate limiters:

```python
from systemdesign.rate_limit import LeakyBucket, TokenBucket

bucket = LeakyBucket(5, 2)
accepted = bucket.add_packet(1)   # False once the queue is full
bucket.stop()

manual = TokenBucket(5, 2, 10, autostart=False)
manual.add_packet(7)
sent = manual.process_one()       # 7, using one token
```

Each bucket drains on a background thread at its rate unless created with
`autostart=False`, in which case `LeakyBucket.leak()` and
`TokenBucket.process_one()` are called by hand. `TokenBucket` starts full and
refills at its token rate up to its capacity; `process_one` takes the next
queued packet and sends it if a token is available, and drops it otherwise.

## What this package does not do

- It does not include a load balancer. The controller service expects one
  (such as HAProxy) in front of the repository services at the URL given by
  `--repository-url`.
- It does not create or fill the `messages` table the repository service
  reads, and it installs no database driver besides what SQLAlchemy and
  Python bring; a `DATABASE_URL` for a server database such as PostgreSQL
  needs that driver installed separately.
- The filter benchmark keeps its users in a local SQLite file, not in a
  database server.
- It does not start MongoDB shards or any other service; the sharding API and
  client expect them to be running already.