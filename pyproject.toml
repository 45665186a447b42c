[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lightstream"
version = "0.1.0"
description = "Pieces of a lightweight MJPEG/H264 video streamer: request path handling, MIME types, query parameters, a worker pool, socket activation and command-line options"
requires-python = ">=3.10"
dependencies = []
keywords = ["mjpeg", "h264", "streaming", "video", "http", "options", "worker-pool"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video :: Display",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lightstream = "lightstream.options:main"

[tool.hatch.build.targets.wheel]
packages = ["lightstream"]

[tool.hatch.build.targets.sdist]
include = ["lightstream", "tests", "pyproject.toml", "README.md"]

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
