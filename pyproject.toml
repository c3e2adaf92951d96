[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "udifkit"
version = "0.1.0"
description = "Extract, flatten and build UDIF disk images (compressed .dmg files)"
requires-python = ">=3.10"
dependencies = []
keywords = ["dmg", "udif", "disk image", "adc", "apple partition map", "iso"]
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
    "Topic :: System :: Archiving",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
udifkit = "udifkit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["udifkit"]

[tool.pytest.ini_options]
addopts = "-ra"
