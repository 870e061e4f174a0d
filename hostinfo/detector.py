"""Platform classification with results memoized per detection context."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from hostinfo.cache import DetectionContext
from hostinfo.config import HostInfoConfig
from hostinfo.platform_types import (
    MICROSOFT_SIGNALS,
    WINDOWS_SIGNALS,
    PlatformSignal,
    PlatformType,
    host_signal,
    native_version_descriptor,
)
from hostinfo.probe import HostProbe
from hostinfo.type_locator import ModuleLocator, TypeLocator

logger = logging.getLogger(__name__)

# Checked in order against the start of the lower-cased version string
_VERSION_PREFIXES = (
    ("linux", PlatformType.LINUX),
    ("darwin", PlatformType.MACOS),
    ("solaris", PlatformType.SOLARIS),
    ("bsd", PlatformType.BSD),
    ("msys", PlatformType.WINDOWS),
    ("cygwin", PlatformType.WINDOWS),
)

_FIXED_SIGNALS = {
    PlatformSignal.WINCE: PlatformType.COMPACT_FRAMEWORK,
    PlatformSignal.XBOX: PlatformType.XBOX,
    PlatformSignal.MACOSX: PlatformType.MACOS,
    PlatformSignal.UNIX_128: PlatformType.UNKNOWN_UNIX,
}


@dataclass
class PlatformReport:
    """Snapshot of every detection answer."""

    platform_type: PlatformType
    is_microsoft: bool
    is_android: bool
    is_mono: bool
    system_version_string: str

    def as_dict(self) -> dict:
        return {
            "platform_type": self.platform_type.value,
            "is_microsoft": self.is_microsoft,
            "is_android": self.is_android,
            "is_mono": self.is_mono,
            "system_version_string": self.system_version_string,
        }


class PlatformDetector:
    """Identify the operating system and runtime the process runs under.

    Every answer is computed lazily on first request and cached in the
    detector's DetectionContext, so repeated queries never probe again.
    None of the queries raise: probe failures count as negative signals.
    """

    def __init__(
        self,
        config: HostInfoConfig | None = None,
        *,
        context: DetectionContext | None = None,
        locator: TypeLocator | None = None,
        probe: HostProbe | None = None,
        signal: PlatformSignal | int | None = None,
    ) -> None:
        """Initialize the detector.

        Args:
            config: Probe paths, command, timeout and marker names.
            context: Memoization table; a fresh one is created if omitted.
            locator: Answers runtime marker lookups.
            probe: Filesystem and external command access.
            signal: OS family signal; read from the host when omitted.
        """
        self._config = config or HostInfoConfig()
        self._context = context if context is not None else DetectionContext()
        self._locator = locator or ModuleLocator()
        self._probe = probe or HostProbe()
        self._signal = signal

    @property
    def context(self) -> DetectionContext:
        return self._context

    def _host_signal(self) -> PlatformSignal | int:
        if self._signal is None:
            self._signal = host_signal()
            logger.debug("Host platform signal: %s", self._signal)
        return self._signal

    def platform_type(self) -> PlatformType:
        """Return the classified platform of the running process."""
        return self._context.get_or_compute("Type", self._classify)

    def is_microsoft(self) -> bool:
        """Whether the OS family is Windows, Windows CE or Xbox."""
        return self._context.get_or_compute(
            "IsMicrosoft", lambda: self._host_signal() in MICROSOFT_SIGNALS
        )

    def is_android(self) -> bool:
        return self._context.get_or_compute(
            "IsAndroid", lambda: self._locator.exists(self._config.markers.android)
        )

    def is_mono(self) -> bool:
        return self._context.get_or_compute(
            "IsMono", lambda: self._locator.exists(self._config.markers.mono)
        )

    def system_version_string(self) -> str:
        """Return a single line describing the OS name and version.

        Possibly empty, never None.
        """
        return self._context.get_or_compute("SystemVersionString", self._read_version)

    def report(self) -> PlatformReport:
        return PlatformReport(
            platform_type=self.platform_type(),
            is_microsoft=self.is_microsoft(),
            is_android=self.is_android(),
            is_mono=self.is_mono(),
            system_version_string=self.system_version_string(),
        )

    def _classify(self) -> PlatformType:
        signal = self._host_signal()
        if signal in WINDOWS_SIGNALS:
            return PlatformType.WINDOWS
        if signal in _FIXED_SIGNALS:
            return _FIXED_SIGNALS[signal]
        if signal != PlatformSignal.UNIX:
            logger.debug("Unrecognized platform signal %r", signal)
            return PlatformType.UNKNOWN

        if self.is_android():
            return PlatformType.ANDROID
        if self._probe.path_exists(self._config.probe.macos_marker_path):
            return PlatformType.MACOS

        os_type = self.system_version_string().lower()
        for prefix, platform_type in _VERSION_PREFIXES:
            if os_type.startswith(prefix):
                return platform_type
        logger.debug("No platform matches version string %r", os_type)
        return PlatformType.UNKNOWN_UNIX

    def _read_version(self) -> str:
        version = native_version_descriptor()
        if not self.is_microsoft():
            if self.is_android():
                version = f"Android {version}"
            else:
                version = self._probe_version() or version
        return version.split("\n", 1)[0].strip()

    def _probe_version(self) -> str | None:
        """Kernel-info file first, then the version command bounded by the timeout."""
        probe_cfg = self._config.probe
        text = None
        if self._probe.path_exists(probe_cfg.kernel_info_path):
            text = self._probe.read_all_text(probe_cfg.kernel_info_path)
        if not text:
            text = self._probe.run_command(
                probe_cfg.version_command,
                probe_cfg.version_args,
                probe_cfg.timeout_seconds,
            )
        return text


_default_detector: PlatformDetector | None = None
_default_lock = threading.Lock()


def default_detector() -> PlatformDetector:
    """Return the detector shared by the whole process."""
    global _default_detector
    with _default_lock:
        if _default_detector is None:
            _default_detector = PlatformDetector()
        return _default_detector


def get_platform_type() -> PlatformType:
    return default_detector().platform_type()


def get_is_microsoft() -> bool:
    return default_detector().is_microsoft()


def get_is_android() -> bool:
    return default_detector().is_android()


def get_is_mono() -> bool:
    return default_detector().is_mono()


def get_system_version_string() -> str:
    return default_detector().system_version_string()
