[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "systemdesign"
version = "0.1.0"
description = "Small working models of system design building blocks: consistent hashing, rate limiting, Bloom and cuckoo filters, database sharding and load-balanced services."
requires-python = ">=3.10"
keywords = [
    "system design",
    "consistent hashing",
    "rate limiting",
    "leaky bucket",
    "token bucket",
    "bloom filter",
    "cuckoo filter",
    "murmurhash3",
    "fnv-1a",
    "sharding",
    "load balancing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Database",
    "Topic :: Education",
]
dependencies = [
    "flask",
    "pymongo",
    "requests",
    "sqlalchemy",
    "termcolor",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
systemdesign-consistent-hashing = "systemdesign.consistent_hashing:main"
systemdesign-rate-limit = "systemdesign.rate_limit:main"
systemdesign-filter-bench = "systemdesign.filter_app:main"
systemdesign-sharding-api = "systemdesign.sharding_api:main"
systemdesign-shard-client = "systemdesign.shard_client:main"
systemdesign-controller-api = "systemdesign.controller_api:main"
systemdesign-repository-api = "systemdesign.repository_api:main"

[tool.hatch.build.targets.wheel]
packages = ["systemdesign"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
