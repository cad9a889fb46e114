[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fuzzcover"
version = "0.3.0"
description = "Deterministic fuzz-input splitting and CBOR, MessagePack, UBJSON and BSON decoding for coverage-guided test generation"
requires-python = ">=3.10"
dependencies = []
keywords = ["fuzzing", "testing", "coverage", "cbor", "msgpack", "ubjson", "bson"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Topic :: File Formats",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["fuzzcover"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
