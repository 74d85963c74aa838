"""Project drivers, tried in order until one serves the site."""

from pathlib import Path
from typing import List, Union

from .base import (
    BasicDriver,
    Driver,
    FrontController,
    IndexFallback,
    PassThrough,
    StaticBoundary,
)
from .moodle import MoodleDriver

DRIVERS: List[Driver] = [
    MoodleDriver(),
    BasicDriver(),
]


def find_driver(site_path: Union[str, Path], site_name: str, uri: str) -> Driver:
    for driver in DRIVERS:
        if driver.serves(site_path, site_name, uri):
            return driver
    return DRIVERS[-1]


__all__ = [
    "BasicDriver",
    "Driver",
    "DRIVERS",
    "FrontController",
    "IndexFallback",
    "MoodleDriver",
    "PassThrough",
    "StaticBoundary",
    "find_driver",
]
