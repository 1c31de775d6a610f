[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gedis"
version = "0.1.0"
description = "A small key-value server speaking the Redis serialization protocol (RESP), with append-only file persistence"
requires-python = ">=3.10"
keywords = ["redis", "resp", "key-value", "database", "server", "aof"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
gedis = "gedis.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gedis"]

[tool.pytest.ini_options]
addopts = "-ra"
