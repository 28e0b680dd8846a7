"""Unit tests configuration file."""

import importlib
import itertools
import os
import sys

import pytest

from packetforge.generator import GeneratorConfig, load
from packetforge.generator.python import generate, write

FILE_DIR = os.path.dirname(os.path.realpath(__file__))
PROTOCOL_FILE = f"{FILE_DIR}/generator/protocol.json"

_package_ids = itertools.count()


def pytest_configure(config):
    """Disable verbose output when running tests."""
    terminal = config.pluginmanager.getplugin("terminal")
    if terminal:
        terminal.TerminalReporter.showfspath = False


@pytest.fixture
def protocol():
    """The sample protocol shared by generator tests."""
    return load(PROTOCOL_FILE)


@pytest.fixture
def build(tmp_path, monkeypatch):
    """Generate a schema into a fresh importable package.

    Returns a function taking a schema and returning an importer for modules
    relative to the generated root package.
    """
    packages: list[str] = []
    monkeypatch.syspath_prepend(str(tmp_path))

    def _build(schema):
        package = f"generated_{next(_package_ids)}"
        config = GeneratorConfig(package=package, namespace_prefix="com.example")
        write(generate(schema, config), tmp_path)
        importlib.invalidate_caches()
        packages.append(package)

        def _import(module):
            return importlib.import_module(f"{package}.{module}")

        return _import

    yield _build

    for name in list(sys.modules):
        if any(name == p or name.startswith(p + ".") for p in packages):
            del sys.modules[name]
