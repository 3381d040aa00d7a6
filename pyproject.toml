[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "socketcan"
version = "0.1.0"
description = "Raw SocketCAN interface driven by an epoll event loop"
requires-python = ">=3.10"
dependencies = []
keywords = ["can", "socketcan", "epoll", "eventfd", "linux", "can-bus"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems :: Controller Area Network (CAN)",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["socketcan"]

[tool.pytest.ini_options]
addopts = "-ra"
