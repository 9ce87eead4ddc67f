[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "recordio"
version = "0.1.1"
description = "Record-oriented file input: delimited, CSV, fixed-size and length-prefixed records, file listing, merging and reducing"
requires-python = ">=3.10"
dependencies = []
keywords = ["records", "io", "merge", "map-reduce", "files", "csv", "gzip"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
recordio = "recordio.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["recordio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
