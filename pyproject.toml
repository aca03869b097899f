[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mazefps"
version = "0.1.0"
description = "Multiplayer maze shooter: UDP game server, client handshake and game-state logic"
requires-python = ">=3.10"
dependencies = []
keywords = ["game", "fps", "multiplayer", "udp", "maze"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: First Person Shooters",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
mazefps-server = "mazefps.server:main"
mazefps-client = "mazefps.client:main"

[tool.hatch.build.targets.wheel]
packages = ["mazefps"]

[tool.pytest.ini_options]
addopts = "-ra"
