[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "graphogm"
version = "0.1.0"
description = "Object-graph mapping helpers for Cypher databases: load query generation and depth-limited save planning."
requires-python = ">=3.10"
dependencies = []
keywords = ["ogm", "graph", "cypher", "property-graph", "query-builder"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["graphogm"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
