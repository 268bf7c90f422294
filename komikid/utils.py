# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>

from functools import cache
import logging
import os
import requests
import traceback

logger = logging.getLogger('komikid')


@cache
def get_data_dir():
    data_dir_path = os.environ.get('KOMIKID_DATA_DIR')

    if not data_dir_path:
        base_path = os.environ.get('XDG_DATA_HOME') or os.path.join(os.path.expanduser('~'), '.local', 'share')
        data_dir_path = os.path.join(base_path, 'komikid')

    if not os.path.exists(data_dir_path):
        os.makedirs(data_dir_path)

    return data_dir_path


def log_error_traceback(e):
    """Returns a user-facing message for an error, logs the traceback of unexpected ones"""
    from komikid.servers.exceptions import ServerException

    if isinstance(e, requests.exceptions.RequestException):
        return 'No Internet connection, timeout or server down'
    if isinstance(e, ServerException):
        return e.message

    logger.info(traceback.format_exc())

    return None


def trunc_filename(filename):
    """Reduce filename length to 255 (common FS limit) if it's too long"""
    return filename.encode('utf-8')[:255].decode('utf-8', 'ignore').strip()
