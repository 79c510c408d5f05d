[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rmdb"
version = "0.1.0"
description = "Pieces of a small relational database: client shell, index key layout, query analysis, planning and result output"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "sql", "query-planner", "b-plus-tree", "index", "client"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rmdb-client = "rmdb.client:main"

[tool.hatch.build.targets.wheel]
packages = ["rmdb"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
