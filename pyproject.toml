[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubebot"
version = "0.1.0"
description = "kubectl access policy, command building, event filtering and message formatting for a chat-driven Kubernetes assistant"
requires-python = ">=3.10"
keywords = ["kubernetes", "kubectl", "chatops", "slack", "notifications"]
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
    "Topic :: System :: Systems Administration",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubebot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
