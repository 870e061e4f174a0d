"""Platform enumerations and the raw OS family signal of the host."""

from __future__ import annotations

import os
import platform as _platform
import sys
from enum import Enum, IntEnum


class PlatformType(Enum):
    """Classified operating system of the running process."""

    UNKNOWN = "unknown"
    WINDOWS = "windows"
    COMPACT_FRAMEWORK = "compact_framework"
    LINUX = "linux"
    MACOS = "macos"
    SOLARIS = "solaris"
    BSD = "bsd"
    UNKNOWN_UNIX = "unknown_unix"
    ANDROID = "android"
    XBOX = "xbox"


class PlatformSignal(IntEnum):
    """Coarse OS family tag reported by the host before classification."""

    WIN32S = 0
    WIN32NT = 1
    WIN32_WINDOWS = 2
    WINCE = 3
    UNIX = 4
    XBOX = 5
    MACOSX = 6
    UNIX_128 = 128


WINDOWS_SIGNALS = frozenset(
    {PlatformSignal.WIN32S, PlatformSignal.WIN32NT, PlatformSignal.WIN32_WINDOWS}
)

MICROSOFT_SIGNALS = WINDOWS_SIGNALS | {PlatformSignal.WINCE, PlatformSignal.XBOX}


def host_signal() -> PlatformSignal | int:
    """Return the OS family signal of the running interpreter.

    Every POSIX host maps to ``UNIX``, including macOS, Cygwin and MSYS;
    the detector tells them apart. Hosts that are neither POSIX nor
    Windows yield ``-1``, which no classification rule recognizes.
    """
    if sys.platform == "win32":
        return PlatformSignal.WIN32NT
    if os.name == "posix":
        return PlatformSignal.UNIX
    return -1


def native_version_descriptor() -> str:
    """Short OS name and release as exposed by the interpreter, e.g. ``Linux 6.1.0``."""
    return " ".join(
        part for part in (_platform.system(), _platform.release()) if part
    )
