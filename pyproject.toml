[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fileukit"
version = "0.1.0"
description = "Everyday file tools: checksums, file merging, HTTP probing and release archiving"
requires-python = ">=3.10"
dependencies = []
keywords = ["checksum", "md5", "sha256", "crc32", "merge", "ffmpeg", "http", "zip", "release"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
fileukit-launch = "fileukit.launcher:main"

[tool.hatch.build.targets.wheel]
packages = ["fileukit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
