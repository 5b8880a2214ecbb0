"""Exception hierarchy for the diagram pipeline."""

from __future__ import annotations


class SclassError(Exception):
    """Base class for every fatal error raised by sclass."""


class UnhandledTypeNameError(SclassError):
    """A type-name node of an unsupported syntactic kind reached the decoder."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Unhandled typeName: {kind}")
        self.kind = kind


class PreconditionError(SclassError):
    """An internal invariant of the extraction pipeline was broken."""


class ConfigError(SclassError):
    """The configuration file or a CLI override could not be applied."""


class CollectionError(SclassError):
    """A collection table could not be loaded."""


class RenderError(SclassError):
    """The external Mermaid renderer failed."""


class SourceError(SclassError):
    """The input file could not be read as UTF-8 text."""
