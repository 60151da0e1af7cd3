[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "svcframe"
version = "0.1.0"
description = "A service lifecycle framework for frame-driven applications: signals, render steps, task queues, scheduling, asset caches, HTTP requests and analytics events."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "services",
    "lifecycle",
    "signals",
    "task-queue",
    "scheduler",
    "game-loop",
    "analytics",
]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Games/Entertainment",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["svcframe"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
