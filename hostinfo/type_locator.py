from __future__ import annotations

import importlib
import importlib.machinery
import importlib.util
import inspect
import logging
import sys
from enum import Flag
from typing import Any, Protocol

from hostinfo.log_setup import TRACE

logger = logging.getLogger(__name__)


class TypeLoadError(LookupError):
    """Raised when a runtime component cannot be resolved by name."""

    pass


class LoadMode(Flag):
    """Resolution flags for ModuleLocator.find."""

    NONE = 0
    # Return None instead of raising TypeLoadError.
    NO_EXCEPTION = 1
    # Import modules that are not loaded yet. Anything on sys.path gets
    # executed, so only use with trusted names.
    LOAD_MODULES = 2


class TypeLocator(Protocol):
    """Answers whether a named runtime component is available in-process."""

    def exists(self, marker: str) -> bool: ...


def _resolve_attr(obj: Any, path: list[str]) -> Any:
    for part in path:
        obj = getattr(obj, part)
    return obj


class ModuleLocator:
    """Locate Python modules, classes and functions by dotted name."""

    def exists(self, marker: str) -> bool:
        """Check whether ``marker`` is loaded or importable, without importing it.

        Top-level names are looked up with ``find_spec``. A dotted name is
        only looked up inside its parent package when that parent is
        already loaded, so no package code runs. Never raises; a malformed
        name or a failing lookup counts as absent.
        """
        if not isinstance(marker, str) or not marker:
            return False
        try:
            if self.find(marker, LoadMode.NO_EXCEPTION) is not None:
                return True
            found = self._spec_available(marker)
        except Exception:
            # loaded modules may raise anything from __getattr__ or their finders
            logger.debug("Lookup of marker %s failed", marker, exc_info=True)
            found = False
        logger.log(TRACE, "Marker %s %s", marker, "found" if found else "not found")
        return found

    def _spec_available(self, name: str) -> bool:
        parent_name, _, _ = name.rpartition(".")
        if not parent_name:
            return importlib.util.find_spec(name) is not None
        parent = sys.modules.get(parent_name)
        search_path = getattr(parent, "__path__", None)
        if search_path is None:
            logger.log(TRACE, "Parent %s of %s is not a loaded package", parent_name, name)
            return False
        return importlib.machinery.PathFinder.find_spec(name, search_path) is not None

    def find(self, name: str, mode: LoadMode = LoadMode.NONE) -> Any:
        """Resolve ``name`` to a module or an attribute of one.

        Already-loaded modules are searched first. With
        ``LoadMode.LOAD_MODULES`` progressively shorter dotted prefixes of
        ``name`` are imported until one of them provides the rest of the
        path as attributes.

        Args:
            name: Dotted name, e.g. ``"collections.OrderedDict"``.
            mode: Resolution flags.

        Returns:
            The resolved object, or None when it cannot be found and
            ``LoadMode.NO_EXCEPTION`` is set.

        Raises:
            TypeLoadError: If nothing matches and ``NO_EXCEPTION`` is not set.
        """
        parts = name.split(".")
        module = sys.modules.get(name)
        if module is not None:
            return module

        # Longest loaded module prefix first
        for i in range(len(parts) - 1, 0, -1):
            prefix = ".".join(parts[:i])
            module = sys.modules.get(prefix)
            if module is None:
                continue
            logger.log(TRACE, "Searching for %s in module %s", name, prefix)
            try:
                obj = _resolve_attr(module, parts[i:])
            except AttributeError:
                continue
            logger.log(TRACE, "Using %s from %s", name, prefix)
            return obj

        if LoadMode.LOAD_MODULES in mode:
            for i in range(len(parts), 0, -1):
                prefix = ".".join(parts[:i])
                logger.warning("(Insecure) importing module %s to resolve %s", prefix, name)
                try:
                    module = importlib.import_module(prefix)
                except ImportError:
                    continue
                try:
                    obj = _resolve_attr(module, parts[i:])
                except AttributeError:
                    continue
                logger.debug("Loaded %s via module %s", name, prefix)
                return obj

        if LoadMode.NO_EXCEPTION in mode:
            return None
        logger.debug("Could not find %s", name)
        raise TypeLoadError(f"Cannot load {name}")


def create_instances(base: type) -> list:
    """Instantiate every concrete subclass of ``base`` defined so far.

    Subclasses are collected recursively. Abstract classes are skipped;
    classes whose no-argument constructor fails are logged and skipped.
    """
    instances = []
    seen: set[type] = set()
    pending = list(base.__subclasses__())
    while pending:
        cls = pending.pop(0)
        if cls in seen:
            continue
        seen.add(cls)
        pending.extend(cls.__subclasses__())
        if inspect.isabstract(cls):
            continue
        try:
            instances.append(cls())
        except Exception:
            logger.error("Could not create instance of %s", cls.__qualname__, exc_info=True)
    return instances
