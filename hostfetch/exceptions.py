from __future__ import annotations


class HostfetchError(Exception):
    """Base class for hostfetch errors."""


class SourceUnavailable(HostfetchError):
    """A detector's file, property or helper program is missing or denied."""


class InvalidValue(HostfetchError):
    """A detector produced a value, but it is empty or a vendor placeholder."""


class CategoryUnresolved(HostfetchError, LookupError):
    def __init__(self, category: str, message: str | None = None):
        self.category = category
        super().__init__(message or f'No source could resolve {category}')


class HostnameNotFound(CategoryUnresolved):
    def __init__(self, message: str = 'Error while getting hostname'):
        super().__init__('hostname', message)


class ConfigError(HostfetchError):
    pass
