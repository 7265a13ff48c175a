[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pqkit"
version = "0.1.0"
description = "PostgreSQL client helpers: array literals, protocol buffers, connection strings, .pgpass lookup and SQL quoting"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "postgresql",
    "postgres",
    "database",
    "arrays",
    "connection-string",
    "pgpass",
    "quoting",
]
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
    "Topic :: Database :: Front-Ends",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pqkit"]

[tool.hatch.build.targets.sdist]
include = ["pqkit", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
