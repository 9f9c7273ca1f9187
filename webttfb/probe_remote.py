"""Remote probe backed by the public load-time testing service."""

import logging
import math

import httpx

from webttfb.errors import ProbeFailure
from webttfb.models import Measurement

logger = logging.getLogger(__name__)

SERVICE_URL = "https://performance.sucuri.net/index.php?ajaxcall"

DEFAULT_HEADERS = {
    "accept": "application/json, text/javascript, */*; q=0.01",
    "accept-language": "en-US,en;q=0.8",
    "user-agent": "Mozilla/5.0 (KHTML, like Gecko) Safari/537.36",
    "origin": "https://performance.sucuri.net",
    "referer": "https://performance.sucuri.net/",
    "x-requested-with": "XMLHttpRequest",
}


def build_form(domain: str, vantage_id: str, private: bool = False) -> dict[str, str]:
    """Build the form fields for one test request.

    The service hides the test from its public listing when is_private
    is present.
    """
    form = {
        "load_time_tester": "1",
        "form_action": "test_load_time",
        "location": vantage_id,
        "domain": domain,
    }
    if private:
        form["is_private"] = "true"
    return form


def _seconds(output: dict, key: str, vantage_id: str) -> float:
    raw = output.get(key)
    if raw is None or raw == "":
        raise ProbeFailure(vantage_id, f"missing {key} in response")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ProbeFailure(vantage_id, f"invalid {key} in response: {raw!r}") from None
    if not math.isfinite(value):
        raise ProbeFailure(vantage_id, f"invalid {key} in response: {raw!r}")
    if value < 0:
        raise ProbeFailure(vantage_id, f"negative {key} in response: {raw!r}")
    return value


def parse_response(payload: object, vantage_id: str) -> Measurement:
    """Extract the timing triple from a decoded service response (pure function).

    The service reports timings as decimal strings under "output" and a
    zero "status" with a human readable "message" on failure.

    Raises:
        ProbeFailure: on a failure status or a malformed payload.
    """
    if not isinstance(payload, dict):
        raise ProbeFailure(vantage_id, "malformed response")

    try:
        status = int(payload.get("status", 0))
    except (TypeError, ValueError):
        status = 0

    if status == 0:
        message = payload.get("message") or "test failed"
        raise ProbeFailure(vantage_id, str(message))

    output = payload.get("output")
    if not isinstance(output, dict):
        raise ProbeFailure(vantage_id, "response has no output")

    return Measurement(
        connect_time=_seconds(output, "connect_time", vantage_id),
        first_byte_time=_seconds(output, "firstbyte_time", vantage_id),
        total_time=_seconds(output, "total_time", vantage_id),
    )


class RemoteProbe:
    """Probe that asks the remote service to test from one of its locations."""

    def __init__(
        self,
        timeout: float = 30.0,
        url: str = SERVICE_URL,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize remote probe.

        Args:
            timeout: Per-request timeout in seconds.
            url: Service endpoint.
            transport: Optional httpx transport (used by tests).
        """
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.timeout = timeout
        self.url = url
        self._transport = transport

    def measure(self, domain: str, vantage_id: str, private: bool = False) -> Measurement:
        """Send one test request and parse the result."""
        form = build_form(domain, vantage_id, private)

        logger.debug("Remote test: vantage=%s, domain=%s, private=%s", vantage_id, domain, private)

        try:
            # One client per call, workers run concurrently
            with httpx.Client(
                timeout=self.timeout,
                headers=DEFAULT_HEADERS,
                transport=self._transport,
            ) as client:
                response = client.post(self.url, data=form)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException:
            raise ProbeFailure(vantage_id, f"timed out after {self.timeout:g}s") from None
        except httpx.HTTPStatusError as e:
            raise ProbeFailure(vantage_id, f"service returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProbeFailure(vantage_id, f"request failed: {e}") from e
        except ValueError as e:
            # json.JSONDecodeError
            raise ProbeFailure(vantage_id, f"invalid JSON response: {e}") from e

        measurement = parse_response(payload, vantage_id)
        logger.debug(
            "Remote test done: vantage=%s, total=%.3fs", vantage_id, measurement.total_time
        )
        return measurement
