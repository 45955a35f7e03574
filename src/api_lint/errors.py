"""Exceptions raised by api-lint.

Rules never raise for document shapes they dislike; these errors cover
setup problems (configuration, unreadable documents) only.
"""


class ApiLintError(Exception):
    """Base class for all api-lint errors."""


class ConfigError(ApiLintError):
    """Invalid rules configuration, e.g. an uncompilable regex."""


class DocumentError(ApiLintError):
    """The API description could not be loaded or its dialect is unknown."""
