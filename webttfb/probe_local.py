"""Local probe using the curl command line tool."""

import json
import logging
import math
import shutil
import subprocess

from webttfb.errors import ProbeFailure
from webttfb.models import Measurement

logger = logging.getLogger(__name__)

# curl --write-out template, rendered as one JSON object
WRITE_OUT = (
    "{"
    '"http_code": %{http_code},'
    '"connect_time": %{time_connect},'
    '"firstbyte_time": %{time_starttransfer},'
    '"total_time": %{time_total},'
    '"download_speed": %{speed_download}'
    "}"
)


def _field(data: dict, key: str, vantage_id: str) -> float:
    try:
        value = float(data[key])
    except (KeyError, TypeError, ValueError) as e:
        raise ProbeFailure(vantage_id, f"incomplete curl output: {e}") from e
    if not math.isfinite(value) or value < 0:
        raise ProbeFailure(vantage_id, f"invalid {key} in curl output: {data[key]!r}")
    return value


def parse_curl_output(output: str, vantage_id: str) -> Measurement:
    """Parse the curl write-out JSON into a measurement (pure function).

    Only HTTP 200 counts as a successful test. download_speed is optional.

    Raises:
        ProbeFailure: if the output is not the expected JSON object, holds
            negative or non-finite values, or the request did not end with
            HTTP 200.

    Examples:
        >>> parse_curl_output(
        ...     '{"http_code": 200, "connect_time": 0.1,'
        ...     ' "firstbyte_time": 0.3, "total_time": 0.4}', "localxx"
        ... ).total_time
        0.4
    """
    if not output or not output.strip():
        raise ProbeFailure(vantage_id, "curl produced no output")

    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ProbeFailure(vantage_id, f"cannot parse curl output: {e}") from e

    if not isinstance(data, dict):
        raise ProbeFailure(vantage_id, "unexpected curl output")

    code = data.get("http_code")
    if code != 200:
        raise ProbeFailure(vantage_id, f"HTTP status {code}")

    speed = None
    if data.get("download_speed") is not None:
        speed = _field(data, "download_speed", vantage_id)

    return Measurement(
        connect_time=_field(data, "connect_time", vantage_id),
        first_byte_time=_field(data, "firstbyte_time", vantage_id),
        total_time=_field(data, "total_time", vantage_id),
        download_speed=speed,
    )


class CurlProbe:
    """Probe that times a single HTTP GET from the current connection.

    Follows redirects and discards the body. The vantage id is only used to
    label failures; every call measures from this machine.
    """

    def __init__(self, timeout: float = 30.0, executable: str = "curl"):
        """Initialize curl probe.

        Args:
            timeout: Maximum duration of the transfer in seconds.
            executable: curl binary name or path.
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.timeout = timeout
        self.executable = executable

        logger.debug("CurlProbe initialized: timeout=%.1fs, executable=%s", timeout, executable)

    @staticmethod
    def available(executable: str = "curl") -> bool:
        """Return True if the curl binary can be found on PATH."""
        return shutil.which(executable) is not None

    def build_command(self, domain: str) -> list[str]:
        return [
            self.executable,
            "-L",
            "-s",
            "-o",
            "/dev/null",
            "--max-time",
            f"{self.timeout:g}",
            "-w",
            WRITE_OUT,
            domain,
        ]

    def measure(self, domain: str, vantage_id: str, private: bool = False) -> Measurement:
        """Run curl once and parse its timing write-out."""
        if not domain or not domain.strip():
            raise ProbeFailure(vantage_id, "empty domain")

        cmd = self.build_command(domain)
        logger.debug("Executing curl: domain=%s, timeout=%.1fs", domain, self.timeout)

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout + 1.0,  # curl enforces --max-time itself
                shell=False,
            )
        except subprocess.TimeoutExpired:
            raise ProbeFailure(vantage_id, f"curl timed out after {self.timeout:g}s") from None
        except OSError as e:
            raise ProbeFailure(vantage_id, f"cannot run curl: {e}") from e

        if result.returncode != 0:
            logger.debug(
                "curl failed: domain=%s, returncode=%d, stderr=%s",
                domain,
                result.returncode,
                result.stderr[:100] if result.stderr else "(empty)",
            )
            raise ProbeFailure(vantage_id, f"curl exited with status {result.returncode}")

        return parse_curl_output(result.stdout, vantage_id)
