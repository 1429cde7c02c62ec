[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tabula"
version = "0.1.0"
description = "A small spreadsheet engine with cell formulas and circular-reference detection"
requires-python = ">=3.10"
dependencies = []
keywords = ["spreadsheet", "formula", "cells", "table"]
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
    "Topic :: Office/Business :: Financial :: Spreadsheet",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tabula"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
