[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jamtool"
version = "2.5.8"
description = "Core pieces of a Jam-style build tool: a small regexp engine, output filters, file-name handling, variables, rules, a Jamfile scanner and target search"
requires-python = ">=3.10"
dependencies = []
keywords = ["build", "jam", "make", "regexp", "scanner", "paths"]
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
    "Topic :: Software Development :: Build Tools",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jamtool"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
