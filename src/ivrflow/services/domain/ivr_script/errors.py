#!/usr/bin/env python3
"""Exceptions raised while compiling IVR scripts into graphs."""


class IvrCompileError(Exception):
    """Base class for per-document compile failures.

    Raised for user-facing input problems only. A batch handler catches
    these per document and reports them next to the successful documents.
    """
    pass


class MalformedInputError(IvrCompileError):
    """Input text is not well-formed XML (or uses forbidden DTD/entity constructs)."""
    pass


class SchemaError(IvrCompileError):
    """Well-formed XML that lacks the expected top-level module collection."""
    pass


class UnsupportedFormatError(ValueError):
    """Requested output format is not implemented.

    This is a programming/configuration error, never a per-document failure.
    """

    def __init__(self, fmt: str, supported: list[str] | None = None):
        self.format = fmt
        self.supported = supported or []
        message = f"Unsupported output format: {fmt!r}"
        if self.supported:
            message += f" (supported: {', '.join(self.supported)})"
        super().__init__(message)
