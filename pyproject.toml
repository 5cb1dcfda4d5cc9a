[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "qflag"
version = "0.1.0"
description = "Command-line flag parsing with paired long and short names, subcommands and generated help."
requires-python = ">=3.10"
dependencies = []
keywords = ["cli", "flags", "command-line", "argument-parsing", "subcommands"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["qflag"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
