# io/gpx.py
"""Export of the current simulated location as a single-waypoint GPX file."""

import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path

from route_sim.domain.entities.geography import Waypoint
from route_sim.io.records import PositionRecord

DEFAULT_NAME = "Simulated Location"


def build_gpx(position: Waypoint, name: str = DEFAULT_NAME) -> ET.Element:
    # the shape Xcode writes for a simulated location
    gpx = ET.Element("gpx", {"creator": "Xcode", "version": "1.1"})
    wpt = ET.SubElement(gpx, "wpt", lat=repr(position.lat), lon=repr(position.lon))
    ET.SubElement(wpt, "name").text = name
    return gpx


def render_gpx(position: Waypoint, name: str = DEFAULT_NAME) -> str:
    return ET.tostring(build_gpx(position, name), encoding="unicode")


def write_atomic(path: str | os.PathLike, content: str) -> Path:
    """Write content next to path, then rename over it so readers never see a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=path.name, suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    return path


def write_gpx(path: str | os.PathLike, position: Waypoint, name: str = DEFAULT_NAME) -> Path:
    return write_atomic(path, render_gpx(position, name))


class GpxSink:
    """Record sink that keeps a GPX file pointing at the latest emitted position."""

    def __init__(self, path: str | os.PathLike, name: str = DEFAULT_NAME):
        self.path, self.name = Path(path), name

    def write(self, record) -> None:
        if isinstance(record, PositionRecord):
            write_gpx(self.path, Waypoint(record.lat, record.lon), self.name)
