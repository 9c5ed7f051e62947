"""diffstory - narrated code reviews for the terminal."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("diffstory")
except PackageNotFoundError:
    __version__ = "dev"
