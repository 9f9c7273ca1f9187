"""Vantage point directory and its configuration file loader."""

import logging
import os
from pathlib import Path

from webttfb.errors import ConfigurationError
from webttfb.models import VantagePoint

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = ".webttfb.cfg"

# Row label for vantage points probed from the local connection
LOCAL_LABEL = "Local"


def default_config_path() -> Path:
    """Return the directory file path, honoring WEBTTFB_CONFIG."""
    override = os.environ.get("WEBTTFB_CONFIG", "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_NAME


class VantageDirectory:
    """Known vantage points keyed by their identifier.

    Identifiers are unique and labels are never empty. Iteration follows
    insertion order, which is also the orchestrator's dispatch order.
    """

    def __init__(self, entries: dict[str, str] | None = None):
        self._points: dict[str, VantagePoint] = {}
        for vantage_id, label in (entries or {}).items():
            self.add(vantage_id, label)

    def add(self, vantage_id: str, label: str) -> bool:
        """Add a vantage point; returns False if it was skipped.

        Entries with an empty id or label are skipped. The first entry for a
        given id wins.
        """
        vantage_id = vantage_id.strip()
        label = label.strip()
        if not vantage_id or not label:
            return False

        if vantage_id in self._points:
            logger.debug("Duplicate vantage id ignored: %s", vantage_id)
            return False

        self._points[vantage_id] = VantagePoint(id=vantage_id, label=label)
        return True

    def get(self, vantage_id: str) -> VantagePoint | None:
        return self._points.get(vantage_id)

    def points(self) -> list[VantagePoint]:
        return list(self._points.values())

    def require_points(self) -> list[VantagePoint]:
        """Return all vantage points, failing on an empty directory."""
        if not self._points:
            raise ConfigurationError("Testing server list is empty")
        return self.points()

    def __len__(self):
        return len(self._points)

    def __iter__(self):
        return iter(self._points.values())

    def __contains__(self, vantage_id):
        return vantage_id in self._points


def parse_directory(text: str) -> VantageDirectory:
    """Parse the directory file format (pure function).

    One vantage point per line: characters 0-6 hold the fixed-width id,
    the label starts at character 9. Lines shorter than 10 characters and
    lines starting with ';' or '#' are ignored.

    Examples:
        >>> len(parse_directory("usfrmnt  Fremont, USA"))
        1
        >>> len(parse_directory("; comment line here"))
        0
    """
    directory = VantageDirectory()

    for line in text.splitlines():
        if len(line) < 10:
            continue

        if line[0] in (";", "#"):
            continue

        directory.add(line[0:7], line[9:])

    return directory


def load_directory(path: Path | str | None = None) -> VantageDirectory:
    """Read and parse the directory file.

    Raises:
        ConfigurationError: if the file is missing, unreadable or yields no
            vantage points.
    """
    path = Path(path) if path is not None else default_config_path()

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read vantage directory {path}: {e}") from e

    directory = parse_directory(text)
    if len(directory) == 0:
        raise ConfigurationError(f"Testing server list is empty: {path}")

    logger.info("Loaded %d vantage points from %s", len(directory), path)
    return directory
