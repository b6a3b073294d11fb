[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "depserver"
version = "0.1.0"
description = "Discover upstream dependency versions and serve dependency metadata over HTTP"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "dependencies",
    "buildpacks",
    "metadata",
    "versions",
    "checksums",
    "release-tracking",
    "wsgi",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
depserver-server = "depserver.handler:main"

[tool.hatch.build.targets.wheel]
packages = ["depserver"]

[tool.hatch.build.targets.sdist]
include = ["depserver", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
