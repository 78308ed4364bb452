"""Exceptions raised while generating documentation."""


class AnnoDocError(Exception):
    """Base class for all annodoc errors."""


class MalformedTagError(AnnoDocError):
    """An annotation tag whose text does not fit its grammar."""

    def __init__(self, tag: str, message: str):
        self.tag = tag
        super().__init__(f"@{tag}: {message}")


class UnresolvedPathParameterError(AnnoDocError):
    """A route path variable with no matching handler argument."""

    def __init__(self, name: str, handler: str):
        self.name = name
        self.handler = handler
        super().__init__(f"parameter {name} does not match method signature for {handler}")


class ConfigError(AnnoDocError):
    """Settings or manifest that cannot be loaded."""


class BaseSchemaError(AnnoDocError):
    """A base-schema override that cannot be read or parsed."""
