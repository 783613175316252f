[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netdiag"
version = "0.1.0"
description = "Pod network connectivity check types, status helpers, check templates, event backoff, metrics and a check-target HTTP server"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "networking",
    "connectivity",
    "monitoring",
    "diagnostics",
    "latency",
    "events",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netdiag-check-target = "netdiag.target:main"

[tool.hatch.build.targets.wheel]
packages = ["netdiag"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
