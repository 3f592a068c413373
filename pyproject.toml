[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bdjuno"
version = "3.0.0"
description = "Blockchain explorer data layer: validator storage in SQLite, table row models and an HTTP actions worker"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["blockchain", "explorer", "validators", "staking", "database", "sqlite"]
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
    "Topic :: Database",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["bdjuno"]

[tool.pytest.ini_options]
addopts = "-ra"
