"""Host platform detection and byte order helpers."""

from hostinfo.detector import (  # noqa: F401
    PlatformDetector,
    default_detector,
    get_is_android,
    get_is_microsoft,
    get_is_mono,
    get_platform_type,
    get_system_version_string,
)
from hostinfo.endian import (  # noqa: F401
    EndianType,
    InvalidArgumentError,
    machine_endian,
    swap_buffer,
    swap_u16,
    swap_u32,
    swap_u64,
)
from hostinfo.platform_types import PlatformSignal, PlatformType  # noqa: F401

__all__ = [
    "EndianType",
    "InvalidArgumentError",
    "PlatformDetector",
    "PlatformSignal",
    "PlatformType",
    "default_detector",
    "get_is_android",
    "get_is_microsoft",
    "get_is_mono",
    "get_platform_type",
    "get_system_version_string",
    "machine_endian",
    "swap_buffer",
    "swap_u16",
    "swap_u32",
    "swap_u64",
]
