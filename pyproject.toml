[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pullmetrics"
version = "0.1.0"
description = "Analyze GitHub pull requests and report review metrics as JSON"
requires-python = ">=3.10"
keywords = ["github", "pull-request", "code-review", "metrics", "jira"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]
dependencies = [
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
pull-metrics = "pullmetrics.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pullmetrics"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
