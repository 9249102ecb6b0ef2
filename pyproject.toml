[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "spawnquery"
version = "0.1.0"
description = "Data-driven spawn selection graphs: weighted pools, priority and random selectors, decorators and per-context state."
requires-python = ">=3.10"
dependencies = []
keywords = ["games", "spawning", "randomization", "loot tables", "procedural generation", "weighted random"]
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
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["spawnquery"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
