"""Upstream dependency discovery and a metadata server for build dependencies."""

__version__ = "0.1.0"

__all__ = [
    "bundler",
    "caapm",
    "composer",
    "curl",
    "dotnet",
    "handler",
    "models",
    "versions",
]