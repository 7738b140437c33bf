"""Detect dental clinics likely to own an intraoral 3D scanner by crawling their websites."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dentalscan")
except PackageNotFoundError:
    __version__ = "0.0.0+dev"
