# Copyright (C) 2019-2024 Valéry Febvre
# SPDX-License-Identifier: GPL-3.0-only or GPL-3.0-or-later
# Author: Valéry Febvre <vfebvre@easter-eggs.com>


class ServerException(Exception):
    def __init__(self, message=None):
        self.message = message or 'An unexpected error occurred'
        super().__init__(self.message)


class NetworkFailure(ServerException):
    """Page could not be retrieved (connection error, timeout or non-200 status)"""

    def __init__(self, url, status_code=None):
        self.url = url
        self.status_code = status_code

        if status_code is not None:
            message = f'Failed to retrieve {url} (HTTP {status_code})'
        else:
            message = f'Failed to retrieve {url}'

        super().__init__(message)


class ParseFailure(ServerException):
    """Page was retrieved but its content could not be parsed"""


class DeserializationFailure(ServerException):
    """A persisted value is corrupt"""
