from __future__ import annotations

import subprocess
import threading
import time
from unittest.mock import patch

import pytest

import hostinfo.detector as detector_mod
from hostinfo.config import HostInfoConfig
from hostinfo.detector import PlatformDetector, PlatformReport
from hostinfo.platform_types import PlatformSignal, PlatformType
from hostinfo.probe import HostProbe
from tests.conftest import FakeLocator, FakeProbe

NATIVE = "Native 1.0"


@pytest.fixture(autouse=True)
def _native_descriptor():
    with patch("hostinfo.detector.native_version_descriptor", return_value=NATIVE):
        yield


def _unix(probe=None, locator=None, config=None):
    return PlatformDetector(
        config,
        locator=locator or FakeLocator(),
        probe=probe or FakeProbe(),
        signal=PlatformSignal.UNIX,
    )


class TestFixedSignals:
    @pytest.mark.parametrize("signal,expected", [
        (PlatformSignal.WIN32S, PlatformType.WINDOWS),
        (PlatformSignal.WIN32NT, PlatformType.WINDOWS),
        (PlatformSignal.WIN32_WINDOWS, PlatformType.WINDOWS),
        (PlatformSignal.WINCE, PlatformType.COMPACT_FRAMEWORK),
        (PlatformSignal.XBOX, PlatformType.XBOX),
        (PlatformSignal.MACOSX, PlatformType.MACOS),
        (PlatformSignal.UNIX_128, PlatformType.UNKNOWN_UNIX),
        (42, PlatformType.UNKNOWN),
        (-1, PlatformType.UNKNOWN),
    ])
    def test_signal_classification(self, signal, expected):
        det = PlatformDetector(
            locator=FakeLocator(), probe=FakeProbe(forbid=True), signal=signal,
        )
        assert det.platform_type() == expected

    def test_raw_int_signal_accepted(self):
        det = PlatformDetector(locator=FakeLocator(), probe=FakeProbe(forbid=True), signal=1)
        assert det.platform_type() == PlatformType.WINDOWS


class TestIsMicrosoft:
    @pytest.mark.parametrize("signal", [
        PlatformSignal.WIN32S, PlatformSignal.WIN32NT, PlatformSignal.WIN32_WINDOWS,
        PlatformSignal.WINCE, PlatformSignal.XBOX,
    ])
    def test_microsoft_signals(self, signal):
        assert PlatformDetector(signal=signal).is_microsoft() is True

    @pytest.mark.parametrize("signal", [
        PlatformSignal.UNIX, PlatformSignal.MACOSX, PlatformSignal.UNIX_128, 77,
    ])
    def test_non_microsoft_signals(self, signal):
        assert PlatformDetector(signal=signal).is_microsoft() is False


class TestUnixClassification:
    @pytest.mark.parametrize("version,expected", [
        ("Linux host 6.1.0-13-amd64 #1 SMP x86_64 GNU/Linux", PlatformType.LINUX),
        ("Darwin mac.local 20.1.0 Darwin Kernel Version 20.1.0", PlatformType.MACOS),
        ("SunOS host 5.11", PlatformType.UNKNOWN_UNIX),
        ("Solaris 11.4", PlatformType.SOLARIS),
        ("BSD 13.2", PlatformType.BSD),
        ("MSYS_NT-10.0 host 3.4.7", PlatformType.WINDOWS),
        ("CYGWIN_NT-10.0 host 3.4.9", PlatformType.WINDOWS),
        ("Haiku 1", PlatformType.UNKNOWN_UNIX),
        ("", PlatformType.UNKNOWN_UNIX),
    ])
    def test_version_prefixes(self, version, expected):
        det = _unix(probe=FakeProbe(command_output=version))
        assert det.platform_type() == expected

    def test_prefix_match_not_substring(self):
        det = _unix(probe=FakeProbe(command_output="Darwin 20.1.0 freebsd-derived bsd linux"))
        assert det.platform_type() == PlatformType.MACOS

    def test_bsd_substring_alone_does_not_match(self):
        det = _unix(probe=FakeProbe(command_output="FreeBSD 13.2-RELEASE"))
        assert det.platform_type() == PlatformType.UNKNOWN_UNIX

    def test_macos_marker_file_wins_over_version(self):
        probe = FakeProbe(files={"/usr/lib/libc.dylib": ""}, command_output="Linux x")
        det = _unix(probe=probe)
        assert det.platform_type() == PlatformType.MACOS
        assert probe.command_calls == []

    def test_android_short_circuits_file_and_command_checks(self):
        locator = FakeLocator(present={"android"}, fail_after_hit=True)
        det = _unix(probe=FakeProbe(forbid=True), locator=locator)
        assert det.platform_type() == PlatformType.ANDROID
        assert locator.calls == ["android"]

    def test_custom_marker_names(self):
        config = HostInfoConfig()
        config.markers.android = "jnius"
        det = _unix(probe=FakeProbe(forbid=True), locator=FakeLocator(present={"jnius"}), config=config)
        assert det.platform_type() == PlatformType.ANDROID

    def test_permission_error_on_marker_file_treated_as_absent(self):
        probe = HostProbe()
        with patch("os.path.exists", side_effect=PermissionError("denied")), \
                patch.object(HostProbe, "run_command", return_value="Linux box"):
            det = _unix(probe=probe)
            assert det.platform_type() == PlatformType.LINUX


class TestSystemVersionString:
    def test_microsoft_uses_native(self):
        det = PlatformDetector(locator=FakeLocator(), probe=FakeProbe(forbid=True),
                               signal=PlatformSignal.WIN32NT)
        assert det.system_version_string() == NATIVE

    def test_android_prefix(self):
        det = _unix(probe=FakeProbe(forbid=True), locator=FakeLocator(present={"android"}))
        assert det.system_version_string() == f"Android {NATIVE}"

    def test_kernel_file_preferred_over_command(self):
        probe = FakeProbe(
            files={"/proc/version": "Linux version 6.1.0 (gcc)\nsecond line\n"},
            command_output="Darwin should-not-be-used",
        )
        det = _unix(probe=probe)
        assert det.system_version_string() == "Linux version 6.1.0 (gcc)"
        assert probe.command_calls == []

    def test_command_used_when_file_missing(self):
        probe = FakeProbe(command_output="Linux host 6.1.0\n")
        det = _unix(probe=probe)
        assert det.system_version_string() == "Linux host 6.1.0"
        assert probe.command_calls == [("uname", ["-a"], 1.0)]

    def test_empty_kernel_file_falls_back_to_command(self):
        probe = FakeProbe(files={"/proc/version": ""}, command_output="Linux x")
        assert _unix(probe=probe).system_version_string() == "Linux x"

    def test_command_failure_keeps_native(self):
        det = _unix(probe=FakeProbe(command_output=None))
        assert det.system_version_string() == NATIVE

    def test_truncates_at_first_newline(self):
        det = _unix(probe=FakeProbe(command_output="first\nsecond\nthird"))
        assert det.system_version_string() == "first"

    def test_timeout_from_config(self):
        config = HostInfoConfig()
        config.probe.timeout_seconds = 10.0
        probe = FakeProbe(command_output="Linux")
        _unix(probe=probe, config=config).system_version_string()
        assert probe.command_calls[0][2] == 10.0

    def test_hung_command_returns_within_timeout(self):
        config = HostInfoConfig()
        config.probe.timeout_seconds = 0.2
        config.probe.kernel_info_path = "/nonexistent/kernel-info"

        def hang(cmd, capture_output, text, timeout):
            time.sleep(timeout)
            raise subprocess.TimeoutExpired(cmd, timeout)

        with patch("hostinfo.probe.subprocess.run", side_effect=hang):
            det = _unix(probe=HostProbe(), config=config)
            start = time.monotonic()
            result = det.system_version_string()
            elapsed = time.monotonic() - start
        assert result == NATIVE
        assert elapsed < 2.0


class TestMemoization:
    def test_type_is_idempotent(self):
        probe = FakeProbe(command_output="Linux a")
        det = _unix(probe=probe)
        assert det.platform_type() == det.platform_type() == PlatformType.LINUX
        assert len(probe.command_calls) == 1

    def test_cached_value_survives_environment_change(self):
        probe = FakeProbe(command_output="Linux a")
        det = _unix(probe=probe)
        det.platform_type()
        probe.command_output = "Darwin b"
        probe.files["/usr/lib/libc.dylib"] = ""
        assert det.platform_type() == PlatformType.LINUX
        assert det.system_version_string() == "Linux a"

    def test_marker_queries_cached(self):
        locator = FakeLocator(present={"clr"})
        det = _unix(locator=locator)
        assert det.is_mono() is True
        assert det.is_mono() is True
        assert det.is_android() is False
        assert det.is_android() is False
        assert locator.calls == ["clr", "android"]

    def test_shared_context_between_detectors(self, context):
        first = PlatformDetector(context=context, locator=FakeLocator(),
                                 probe=FakeProbe(command_output="Linux"), signal=PlatformSignal.UNIX)
        second = PlatformDetector(context=context, locator=FakeLocator(),
                                  probe=FakeProbe(forbid=True), signal=PlatformSignal.UNIX)
        assert first.platform_type() == PlatformType.LINUX
        assert second.platform_type() == PlatformType.LINUX

    def test_concurrent_first_access_computes_once(self):
        calls = []
        gate = threading.Event()

        class SlowProbe(FakeProbe):
            def run_command(self, command, args, timeout):
                calls.append(command)
                gate.wait(1)
                return "Linux slow"

        det = _unix(probe=SlowProbe())
        results = []
        threads = [threading.Thread(target=lambda: results.append(det.platform_type())) for _ in range(4)]
        for t in threads:
            t.start()
        gate.set()
        for t in threads:
            t.join()
        assert results == [PlatformType.LINUX] * 4
        assert calls == ["uname"]


class TestReport:
    def test_report_fields(self):
        det = _unix(probe=FakeProbe(command_output="Linux r"), locator=FakeLocator(present={"clr"}))
        report = det.report()
        assert isinstance(report, PlatformReport)
        assert report.as_dict() == {
            "platform_type": "linux",
            "is_microsoft": False,
            "is_android": False,
            "is_mono": True,
            "system_version_string": "Linux r",
        }


class TestDefaultDetector:
    def test_shared_instance(self):
        with patch.object(detector_mod, "_default_detector", None):
            assert detector_mod.default_detector() is detector_mod.default_detector()

    def test_module_functions_delegate(self):
        det = _unix(probe=FakeProbe(command_output="Linux d"))
        with patch.object(detector_mod, "_default_detector", det):
            assert detector_mod.get_platform_type() == PlatformType.LINUX
            assert detector_mod.get_system_version_string() == "Linux d"
            assert detector_mod.get_is_microsoft() is False
            assert detector_mod.get_is_android() is False
            assert detector_mod.get_is_mono() is False

    def test_host_detection_never_raises(self):
        det = PlatformDetector()
        assert isinstance(det.platform_type(), PlatformType)
        assert isinstance(det.system_version_string(), str)
        assert "\n" not in det.system_version_string()


class TestInvalidSettingsNeverRaise:
    def test_null_kernel_path_falls_back_to_command(self):
        config = HostInfoConfig()
        config.probe.kernel_info_path = None
        with patch.object(HostProbe, "run_command", return_value="Linux fallback"):
            det = _unix(probe=HostProbe(), config=config)
            assert det.system_version_string() == "Linux fallback"
            assert det.platform_type() == PlatformType.LINUX

    def test_null_android_marker_counts_as_absent(self):
        from hostinfo.type_locator import ModuleLocator

        config = HostInfoConfig()
        config.markers.android = None
        det = _unix(probe=FakeProbe(command_output="Linux m"), locator=ModuleLocator(), config=config)
        assert det.is_android() is False
        assert det.platform_type() == PlatformType.LINUX
