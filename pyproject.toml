[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sealstore"
version = "0.1.0"
description = "Snapshot-versioned cluster storage with reference-counted slot allocation, plus Mersenne-31 field helpers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "storage",
    "snapshot",
    "copy-on-write",
    "asyncio",
    "allocator",
    "mersenne31",
    "finite-field",
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
    "Framework :: AsyncIO",
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
sealstore = "sealstore.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sealstore"]

[tool.hatch.build.targets.sdist]
include = ["sealstore", "tests", "README.md", "pyproject.toml"]

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
