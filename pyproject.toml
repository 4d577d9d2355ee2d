[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "easeprobe"
version = "0.1.0"
description = "Health probing core: probe results, status tracking, notification strategies, TCP and TLS probes."
requires-python = ">=3.10"
keywords = ["monitoring", "health-check", "probe", "tls", "tcp", "sla", "socks5"]
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
    "Topic :: System :: Monitoring",
]
dependencies = [
    "pyyaml",
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pyyaml",
    "cryptography",
]

[tool.hatch.build.targets.wheel]
packages = ["easeprobe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
