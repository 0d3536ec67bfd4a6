[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "temporalzone"
version = "0.1.0"
description = "Staking delegation history records and auto-compounding settings for a proof-of-stake chain"
requires-python = ">=3.10"
dependencies = []
keywords = ["staking", "delegation", "compounding", "bech32", "blockchain"]
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
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["temporalzone"]

[tool.pytest.ini_options]
addopts = "-ra"
