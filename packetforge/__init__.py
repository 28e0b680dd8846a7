"""Packetforge - Codec generator for id-dispatched network protocols."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("packetforge")
except PackageNotFoundError:
    __version__ = "(local)"
