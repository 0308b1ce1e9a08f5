[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hvmcore"
version = "0.1.0"
description = "A graph-rewriting runtime for lambda-calculus terms stored in a heap of tagged pointers"
requires-python = ">=3.10"
keywords = ["lambda-calculus", "interaction-nets", "graph-reduction", "runtime", "interpreter"]
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
    "Topic :: Software Development :: Interpreters",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hvmcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
