[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "certificados"
version = "2.0.0"
description = "Generates library no-debt certificates as Word documents and keeps a local SQLite register of the certificates issued."
requires-python = ">=3.10"
dependencies = []
keywords = ["certificates", "library", "docx", "dspace", "sqlite", "csv"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Natural Language :: Spanish",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
certificados = "certificados.cli:main"

[tool.setuptools.packages.find]
include = ["certificados*"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
