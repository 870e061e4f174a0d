from __future__ import annotations

import logging
import os
import sys
import uuid
import zlib

from hostinfo.cache import DetectionContext
from hostinfo.config import InstallationConfig

logger = logging.getLogger(__name__)


class InstallationIdError(RuntimeError):
    """Raised when no usable program identifier can be derived."""

    pass


def installation_guid(config: InstallationConfig | None = None) -> uuid.UUID:
    """Return the identifier of this installation, creating it on first use.

    The GUID lives in ``<data_dir>/<vendor_dir>/<file_name>``; only the
    first line of the file is read.
    """
    config = config or InstallationConfig()
    path = config.path
    if not os.path.isfile(path):
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(str(uuid.uuid4()))
        logger.info("Created installation id at %s", path)
    with open(path) as f:
        first_line = f.readline().strip()
    return uuid.UUID(first_line)


def _default_base_dir() -> str:
    main = sys.modules.get("__main__")
    main_file = getattr(main, "__file__", None)
    if main_file:
        return os.path.dirname(os.path.abspath(main_file))
    return os.getcwd()


def program_id(
    config: InstallationConfig | None = None,
    base_dir: str | None = None,
    context: DetectionContext | None = None,
) -> int:
    """Combine the installation GUID with the program directory into a 32-bit id.

    Two copies of a program in different directories on the same machine
    get different ids; the same copy always gets the same one.

    Raises:
        InstallationIdError: If the combination hashes to zero.
    """
    def compute() -> int:
        guid = installation_guid(config)
        directory = base_dir or _default_base_dir()
        value = (zlib.crc32(guid.bytes) ^ zlib.crc32(directory.encode("utf-8"))) & 0xFFFFFFFF
        if value == 0:
            raise InstallationIdError(f"Program id for {directory} hashes to zero")
        logger.debug("Program id %08x for %s", value, directory)
        return value

    if context is None:
        return compute()
    return context.get_or_compute("ProgramId", compute)
