[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lockupmanager"
version = "0.1.0"
description = "Small HTTP gateway that checks a passkey and forwards account lock-toggle requests to an upstream lockup service"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "gateway", "account", "lockout", "admin"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
lockupmanager = "lockupmanager.server:main"
lockupmanager-client = "lockupmanager.client:main"

[tool.hatch.build.targets.wheel]
packages = ["lockupmanager"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
