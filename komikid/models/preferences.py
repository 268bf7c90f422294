# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from abc import ABC
from abc import abstractmethod
import json
import logging
import os
import threading

from komikid.utils import get_data_dir

logger = logging.getLogger(__name__)


class Preferences(ABC):
    """Key/value store of a server's preferences

    Values are strings or booleans. Each server owns its own store, so keys
    don't need to be prefixed by the server ID.
    """

    @abstractmethod
    def contains(self, key):
        pass

    @abstractmethod
    def get(self, key, default=None):
        pass

    @abstractmethod
    def put(self, key, value):
        pass

    @abstractmethod
    def remove(self, key):
        pass

    def get_boolean(self, key, default=False):
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ('1', 'true', 'yes', 'on')

        return default

    def get_string(self, key, default=None):
        value = self.get(key, default)
        if value is None:
            return default

        return str(value)

    def set_boolean(self, key, value):
        self.put(key, bool(value))

    def set_string(self, key, value):
        if value is None:
            self.remove(key)
        else:
            self.put(key, str(value))


class MemoryPreferences(Preferences):
    """Preferences kept in memory, lost on exit"""

    def __init__(self, values=None):
        self._values = dict(values or {})
        self._lock = threading.Lock()

    def contains(self, key):
        return key in self._values

    def get(self, key, default=None):
        return self._values.get(key, default)

    def put(self, key, value):
        with self._lock:
            self._values[key] = value

    def remove(self, key):
        with self._lock:
            self._values.pop(key, None)


class JsonPreferences(Preferences):
    """Preferences stored in a JSON file

    The file is read on first access and rewritten on each change.
    """

    def __init__(self, name, path=None):
        self.name = name
        if path is None:
            dir_path = os.path.join(get_data_dir(), 'preferences')
            if not os.path.exists(dir_path):
                os.makedirs(dir_path)
            path = os.path.join(dir_path, f'{name}.json')
        self.path = path

        self._lock = threading.Lock()
        self._values = None

    @property
    def values(self):
        if self._values is None:
            self._values = self.load()

        return self._values

    def contains(self, key):
        return key in self.values

    def get(self, key, default=None):
        return self.values.get(key, default)

    def load(self):
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as fp:
                values = json.load(fp)
        except (OSError, ValueError) as e:
            logger.warning('%s: unreadable preferences file %s (%s)', self.name, self.path, e)
            return {}

        if not isinstance(values, dict):
            logger.warning('%s: invalid preferences file %s', self.name, self.path)
            return {}

        return values

    def put(self, key, value):
        with self._lock:
            self.values[key] = value
            self.save()

    def remove(self, key):
        with self._lock:
            if key not in self.values:
                return

            del self.values[key]
            self.save()

    def save(self):
        tmp_path = self.path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as fp:
            json.dump(self._values, fp, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)
