[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kprocfs"
version = "0.17.0"
description = "Parsers for the data structures exposed by the Linux /proc filesystem"
requires-python = ">=3.10"
dependencies = []
keywords = ["procfs", "proc", "linux", "kernel", "monitoring"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kprocfs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
