[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rings"
version = "0.1.0"
description = "Application framework toolkit: layered configuration, structured errors, module lifecycle, services, weighted balancing and SQL helpers"
requires-python = ">=3.10"
keywords = [
    "framework",
    "configuration",
    "lifecycle",
    "services",
    "load-balancing",
    "errors",
    "sql",
    "cargo",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]
dependencies = [
    "pyyaml>=6.0",
    "tomlkit>=0.12",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
]

[project.scripts]
rings-cargo = "rings.cargo:main"

[tool.hatch.build.targets.wheel]
packages = ["rings"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 120
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
