"""
Persisted configuration store.

Holds the appliance configuration document in memory and exposes
get/set/delete by slash-separated path, presence-as-true flag checks,
an atomic whole-document write, and the dirty-subsystem markers that
defer an apply until the operator asks for it.
"""
import copy
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Dict, List

from dhcpha.exceptions import ConfigStoreError
from dhcpha.utils.utils import atomic_write_json

logger = logging.getLogger('dhcpha')

_MISSING = object()


def _split(path: str) -> List[str]:
    keys = [key for key in path.split('/') if key]
    if not keys:
        raise ValueError(f"Empty configuration path: {path!r}")
    return keys


def _is_index(key: str) -> bool:
    return key.isascii() and key.isdigit()


def _step(node: Any, key: str) -> Any:
    """Descend one level; list nodes are indexed by numeric keys."""
    if isinstance(node, dict):
        return node.get(key, _MISSING)
    if isinstance(node, list) and _is_index(key):
        index = int(key)
        return node[index] if index < len(node) else _MISSING
    return _MISSING


class ConfigStore:
    """Hierarchical configuration document backed by a JSON file."""

    def __init__(self, config_path: str, run_dir: str):
        self.config_path = config_path
        self.run_dir = run_dir
        self._document: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """(Re)read the document from disk; a missing file is an empty document."""
        if not os.path.exists(self.config_path):
            logger.warning(f"Configuration file not found at {self.config_path}, starting empty")
            self._document = {}
            return

        try:
            with open(self.config_path, 'r') as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigStoreError(self.config_path, f"invalid JSON: {str(e)}")
        except OSError as e:
            raise ConfigStoreError(self.config_path, str(e))

        if not isinstance(document, dict):
            raise ConfigStoreError(self.config_path, "top level is not an object")
        self._document = document

    def get(self, path: str, default: Any = None) -> Any:
        """Return a copy of the value at path, or default when it is absent."""
        node: Any = self._document
        for key in _split(path):
            node = _step(node, key)
            if node is _MISSING:
                return default
        return copy.deepcopy(node)

    def set(self, path: str, value: Any) -> None:
        """Set the value at path, creating intermediate objects as needed."""
        keys = _split(path)
        current = self._document

        # Navigate to the parent of the target key
        for key in keys[:-1]:
            child = _step(current, key)
            if child is _MISSING or not isinstance(child, (dict, list)):
                if not isinstance(current, dict):
                    raise ConfigStoreError(path, f"cannot create '{key}' inside a list")
                child = {}
                current[key] = child
            current = child

        last = keys[-1]
        if isinstance(current, list):
            if not _is_index(last) or int(last) > len(current):
                raise ConfigStoreError(path, "list index out of range")
            if int(last) == len(current):
                current.append(copy.deepcopy(value))
            else:
                current[int(last)] = copy.deepcopy(value)
        else:
            current[last] = copy.deepcopy(value)

    def delete(self, path: str) -> None:
        """Remove the value at path; deleting an absent path is a no-op."""
        keys = _split(path)
        parent: Any = self._document
        for key in keys[:-1]:
            parent = _step(parent, key)
            if parent is _MISSING:
                return

        last = keys[-1]
        if isinstance(parent, dict):
            parent.pop(last, None)
        elif isinstance(parent, list) and _is_index(last) and int(last) < len(parent):
            del parent[int(last)]

    def path_enabled(self, path: str) -> bool:
        """Presence-as-true check: a flag is on when its key exists with a non-null, non-false value."""
        value = self.get(path, _MISSING)
        return value is not _MISSING and value is not None and value is not False

    def write(self, description: str) -> None:
        """Commit the whole document to disk with a revision stamp."""
        self._document['revision'] = {
            'time': int(time.time()),
            'description': description,
        }
        try:
            atomic_write_json(self.config_path, self._document)
        except OSError as e:
            raise ConfigStoreError(self.config_path, str(e))
        logger.info(f"Configuration written: {description}")

    def _dirty_marker(self, subsystem: str) -> Path:
        return Path(self.run_dir) / f"{subsystem}.dirty"

    def mark_dirty(self, subsystem: str) -> None:
        marker = self._dirty_marker(subsystem)
        marker.parent.mkdir(parents=True, exist_ok=True)
        marker.touch()
        logger.debug(f"Subsystem marked dirty: {subsystem}")

    def clear_dirty(self, subsystem: str) -> None:
        marker = self._dirty_marker(subsystem)
        if marker.exists():
            marker.unlink()
            logger.debug(f"Subsystem dirty flag cleared: {subsystem}")

    def is_dirty(self, subsystem: str) -> bool:
        return self._dirty_marker(subsystem).exists()
