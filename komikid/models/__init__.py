# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

# flake8: noqa: F401

from .preferences import JsonPreferences
from .preferences import MemoryPreferences
from .preferences import Preferences
