"""Homewatt home energy simulation and insights backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("homewatt")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
