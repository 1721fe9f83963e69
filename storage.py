# -*- coding: utf-8 -*-
import json
import logging
import os

logger = logging.getLogger(__name__)


# ---------------------------
# Load / Save (JSON Database)
# ---------------------------
class JsonStore:
    """A string-keyed map of epoch-ms timestamps, mirrored to a JSON file.

    Every mutation rewrites the whole file. The write goes through a temp file
    and ``os.replace`` so a crash mid-write leaves the previous copy intact.
    """

    def __init__(self, path):
        self.path = path
        self._data = {}

    def load(self):
        """Loads the map from disk. A missing file starts empty."""
        try:
            with open(self.path, "r") as f:
                raw = json.load(f)
        except FileNotFoundError:
            logger.info("%s not found, starting with an empty store.", self.path)
            raw = {}
        except (OSError, ValueError) as e:
            logger.error("Error loading %s: %s", self.path, e)
            raw = {}

        if not isinstance(raw, dict):
            logger.error("Ignoring %s: expected a JSON object, got %s", self.path, type(raw).__name__)
            raw = {}

        self._data = {}
        for key, value in raw.items():
            # keys are Discord ids
            if not str(key).isdigit():
                logger.warning("Dropping non-numeric key %r in %s", key, self.path)
                continue
            try:
                self._data[str(key)] = int(value)
            except (TypeError, ValueError):
                logger.warning("Dropping non-numeric entry %r in %s", key, self.path)
        return self

    def save(self):
        """Rewrites the whole file."""
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write %s: %s", self.path, e)

    def get(self, key, default=None):
        return self._data.get(str(key), default)

    def set(self, key, value):
        self._data[str(key)] = int(value)
        self.save()

    def delete(self, key):
        """Removes ``key``; returns whether it was present."""
        if self._data.pop(str(key), None) is None:
            return False
        self.save()
        return True

    def items(self):
        return list(self._data.items())

    def __contains__(self, key):
        return str(key) in self._data

    def __len__(self):
        return len(self._data)
