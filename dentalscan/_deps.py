"""Dependency check run before the CLI starts a scan."""

import sys

# (import_name, pip_package_name)
REQUIRED = [
    ("httpx", "httpx"),
    ("bs4", "beautifulsoup4"),
    ("lxml", "lxml"),
    ("tqdm", "tqdm"),
]

INSTALL_CMD = "pip install dentalscan"
INSTALL_CMD_SOURCE = "pip install -e ."


def _import(name: str) -> bool:
    try:
        __import__(name)
        return True
    except ImportError:
        return False


def missing_required() -> list[str]:
    """pip names of required packages that cannot be imported."""
    return [pip_name for mod_name, pip_name in REQUIRED if not _import(mod_name)]


def check_required() -> bool:
    """Verify required dependencies are importable; print install hints and exit otherwise."""
    missing = missing_required()
    if not missing:
        return True
    print("Missing required dependencies.", file=sys.stderr)
    print("", file=sys.stderr)
    print("  Install from PyPI:", file=sys.stderr)
    print(f"    {INSTALL_CMD}", file=sys.stderr)
    print("", file=sys.stderr)
    print("  Or install from source (project directory):", file=sys.stderr)
    print(f"    {INSTALL_CMD_SOURCE}", file=sys.stderr)
    print("", file=sys.stderr)
    print("  Missing:", ", ".join(missing), file=sys.stderr)
    sys.exit(1)
