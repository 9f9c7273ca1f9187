"""Unit tests for CurlProbe."""

import json
import subprocess

import pytest

from webttfb.errors import ProbeFailure
from webttfb.probe_local import WRITE_OUT, CurlProbe, parse_curl_output


def curl_json(code=200, connect=0.05, first_byte=0.2, total=0.25, speed=51234.0):
    return json.dumps(
        {
            "http_code": code,
            "connect_time": connect,
            "firstbyte_time": first_byte,
            "total_time": total,
            "download_speed": speed,
        }
    )


class TestParseCurlOutput:
    """Test curl write-out parsing."""

    def test_parse_success(self):
        m = parse_curl_output(curl_json(), "usfrmnt")

        assert m.connect_time == 0.05
        assert m.first_byte_time == 0.2
        assert m.total_time == 0.25
        assert m.download_speed == 51234.0

    def test_download_speed_optional(self):
        output = '{"http_code": 200, "connect_time": 0.1, "firstbyte_time": 0.2, "total_time": 0.3}'

        assert parse_curl_output(output, "usfrmnt").download_speed is None

    @pytest.mark.parametrize(
        "output",
        [
            '{"http_code": 200, "connect_time": NaN, "firstbyte_time": 0.2, "total_time": 0.3}',
            '{"http_code": 200, "connect_time": 0.1, "firstbyte_time": 0.2, "total_time": Infinity}',
            '{"http_code": 200, "connect_time": 0.1, "firstbyte_time": -0.2, "total_time": 0.3}',
            '{"http_code": 200, "connect_time": 0.1, "firstbyte_time": 0.2, "total_time": 0.3,'
            ' "download_speed": NaN}',
        ],
    )
    def test_non_finite_or_negative_rejected(self, output):
        """Test NaN, infinite and negative values are failures, not measurements."""
        with pytest.raises(ProbeFailure, match="invalid"):
            parse_curl_output(output, "usfrmnt")

    def test_non_200_is_failure(self):
        """Test only HTTP 200 counts as success."""
        with pytest.raises(ProbeFailure, match="HTTP status 404"):
            parse_curl_output(curl_json(code=404), "localxx")

    def test_unreachable_code_zero(self):
        with pytest.raises(ProbeFailure, match="HTTP status 0"):
            parse_curl_output(curl_json(code=0, connect=0, first_byte=0, total=0), "localxx")

    @pytest.mark.parametrize("output", ["", "   ", None])
    def test_empty_output(self, output):
        with pytest.raises(ProbeFailure, match="no output"):
            parse_curl_output(output, "localxx")

    def test_malformed_output(self):
        with pytest.raises(ProbeFailure, match="cannot parse"):
            parse_curl_output("{not json", "localxx")

    def test_incomplete_output(self):
        with pytest.raises(ProbeFailure, match="incomplete"):
            parse_curl_output('{"http_code": 200, "connect_time": 0.1}', "localxx")


class TestCurlProbeBuildCommand:
    """Test command construction."""

    def test_build_command(self):
        probe = CurlProbe(timeout=10)

        cmd = probe.build_command("https://example.com")

        assert cmd == [
            "curl", "-L", "-s", "-o", "/dev/null",
            "--max-time", "10",
            "-w", WRITE_OUT,
            "https://example.com",
        ]

    def test_fractional_timeout(self):
        probe = CurlProbe(timeout=2.5, executable="/usr/bin/curl")

        cmd = probe.build_command("example.com")

        assert cmd[0] == "/usr/bin/curl"
        assert cmd[cmd.index("--max-time") + 1] == "2.5"

    def test_write_out_template_fields(self):
        """Test the template requests the timings parse_curl_output reads."""
        fields = (
            "%{http_code}",
            "%{time_connect}",
            "%{time_starttransfer}",
            "%{time_total}",
            "%{speed_download}",
        )
        for field in fields:
            assert field in WRITE_OUT


class TestCurlProbeInitialization:
    """Test CurlProbe configuration."""

    def test_default_timeout(self):
        assert CurlProbe().timeout == 30.0

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_invalid_timeout(self, timeout):
        with pytest.raises(ValueError, match="timeout must be positive"):
            CurlProbe(timeout=timeout)


class TestCurlProbeMeasure:
    """Test measure() with subprocess.run replaced."""

    def test_success(self, monkeypatch):
        captured = {}

        def fake_run(cmd, **kwargs):
            captured["cmd"] = cmd
            captured["kwargs"] = kwargs
            return subprocess.CompletedProcess(cmd, 0, stdout=curl_json(total=0.4), stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)

        m = CurlProbe(timeout=5).measure("example.com", "localxx")

        assert m.total_time == 0.4
        assert captured["cmd"][-1] == "example.com"
        assert captured["kwargs"]["shell"] is False
        assert captured["kwargs"]["timeout"] == 6.0

    def test_non_zero_exit(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 6, stdout="", stderr="Could not resolve host")

        monkeypatch.setattr(subprocess, "run", fake_run)

        with pytest.raises(ProbeFailure, match="exited with status 6"):
            CurlProbe().measure("nonexistent.invalid", "localxx")

    def test_timeout(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

        monkeypatch.setattr(subprocess, "run", fake_run)

        with pytest.raises(ProbeFailure, match="timed out"):
            CurlProbe(timeout=1).measure("example.com", "localxx")

    def test_missing_binary(self, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", cmd[0])

        monkeypatch.setattr(subprocess, "run", fake_run)

        with pytest.raises(ProbeFailure, match="cannot run curl"):
            CurlProbe().measure("example.com", "localxx")

    def test_empty_domain(self):
        with pytest.raises(ProbeFailure, match="empty domain"):
            CurlProbe().measure("  ", "localxx")
