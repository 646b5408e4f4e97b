[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mcpconfig"
version = "0.1.0"
description = "Manage MCP server templates and profiles stored as JSON-with-comments files"
requires-python = ">=3.10"
dependencies = []
keywords = ["mcp", "configuration", "profiles", "templates", "jsonc"]
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
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mcpconfig"]

[tool.hatch.build.targets.sdist]
include = ["mcpconfig", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
