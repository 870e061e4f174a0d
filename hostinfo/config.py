from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


@dataclass
class ProbeConfig:
    """Filesystem paths and external command used to identify the host."""

    version_command: str = "uname"
    version_args: list[str] = field(default_factory=lambda: ["-a"])
    timeout_seconds: float = 1.0
    kernel_info_path: str = "/proc/version"
    macos_marker_path: str = "/usr/lib/libc.dylib"


@dataclass
class MarkerConfig:
    """Runtime marker names resolved through the type locator."""

    android: str = "android"
    mono: str = "clr"


@dataclass
class InstallationConfig:
    """Location of the persisted installation identifier."""

    data_dir: str | None = None
    vendor_dir: str = "hostinfo"
    file_name: str = "installation.guid"

    def resolve_data_dir(self) -> str:
        """Return the configured data directory or the per-OS default.

        Windows uses ``%PROGRAMDATA%``; every other host uses
        ``~/.local/share``.
        """
        if self.data_dir:
            return os.path.expanduser(self.data_dir)
        if sys.platform == "win32":
            return os.environ.get("PROGRAMDATA", r"C:\ProgramData")
        return os.path.join(os.path.expanduser("~"), ".local", "share")

    @property
    def path(self) -> str:
        return os.path.join(self.resolve_data_dir(), self.vendor_dir, self.file_name)


@dataclass
class DebugConfig:
    """Debug mode settings."""

    enabled: bool = False
    trace: bool = False
    verbose: bool = False


@dataclass
class HostInfoConfig:
    """Top-level configuration aggregating all subsections."""

    probe: ProbeConfig = field(default_factory=ProbeConfig)
    markers: MarkerConfig = field(default_factory=MarkerConfig)
    installation: InstallationConfig = field(default_factory=InstallationConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def _require_str(section: dict, name: str, key: str, default: str) -> str:
    value = section.get(key, default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{name}.{key} must be a non-empty string")
    return value


def load_config(path: str) -> HostInfoConfig:
    """Load and validate configuration from a YAML file.

    Every section is optional; missing keys take the dataclass defaults.

    Args:
        path: Filesystem path to the YAML configuration file.

    Returns:
        A fully populated HostInfoConfig instance.

    Raises:
        ConfigError: If the file does not exist, is not a mapping, or
            probe.timeout_seconds is not a positive number, or a
            path, command or marker name is not a non-empty string.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")

    # `or {}` fallback handles YAML null values for optional sections
    probe_raw = raw.get("probe", {}) or {}
    markers_raw = raw.get("markers", {}) or {}
    installation_raw = raw.get("installation", {}) or {}
    debug_raw = raw.get("debug", {}) or {}

    defaults = ProbeConfig()
    try:
        timeout = float(probe_raw.get("timeout_seconds", defaults.timeout_seconds))
    except (TypeError, ValueError):
        raise ConfigError("probe.timeout_seconds must be a number") from None
    if timeout <= 0:
        raise ConfigError("probe.timeout_seconds must be positive")

    version_args = probe_raw.get("version_args", defaults.version_args)
    if isinstance(version_args, str):
        version_args = version_args.split()
    if not isinstance(version_args, list):
        raise ConfigError("probe.version_args must be a list or a string")

    data_dir = installation_raw.get("data_dir")
    if data_dir is not None and not isinstance(data_dir, str):
        raise ConfigError("installation.data_dir must be a string")

    logger.debug("Loaded config from %s", path)
    logger.debug("Version probe=%s timeout=%.1fs", probe_raw.get("version_command", defaults.version_command), timeout)

    return HostInfoConfig(
        probe=ProbeConfig(
            version_command=_require_str(probe_raw, "probe", "version_command", defaults.version_command),
            version_args=[str(a) for a in version_args],
            timeout_seconds=timeout,
            kernel_info_path=_require_str(probe_raw, "probe", "kernel_info_path", defaults.kernel_info_path),
            macos_marker_path=_require_str(probe_raw, "probe", "macos_marker_path", defaults.macos_marker_path),
        ),
        markers=MarkerConfig(
            android=_require_str(markers_raw, "markers", "android", "android"),
            mono=_require_str(markers_raw, "markers", "mono", "clr"),
        ),
        installation=InstallationConfig(
            data_dir=data_dir,
            vendor_dir=_require_str(installation_raw, "installation", "vendor_dir", "hostinfo"),
            file_name=_require_str(installation_raw, "installation", "file_name", "installation.guid"),
        ),
        debug=DebugConfig(
            enabled=bool(debug_raw.get("enabled", False)),
            trace=bool(debug_raw.get("trace", False)),
            verbose=bool(debug_raw.get("verbose", False)),
        ),
    )
