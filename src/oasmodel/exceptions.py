"""Exception hierarchy for oasmodel.

All exceptions inherit from :class:`OasModelError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oasmodel.exit_codes`.
The top-level error handler in :func:`oasmodel.app.main` catches
``OasModelError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

The model-interpretation errors (everything below :class:`ModelError`) are
raised when a value is read against the object model. They carry the full
list of collected issues so that one pass reports every problem in a
document, not just the first one.

Subclass hierarchy::

    OasModelError (exit 1)
    +-- InvalidUsageError             (exit 2)
    +-- SpecParseError                (exit 7)
    +-- ConfigError                   (exit 1)
    +-- ModelError
        +-- ShapeMismatchError        (exit 8)
        +-- ConstraintViolationError  (exit 9)
        +-- UnresolvedReferenceError  (exit 10)
        |   +-- CyclicReferenceError  (exit 10)
        +-- AmbiguousResponseKeyError (exit 11)
"""

from __future__ import annotations

from typing import Any, Optional

from oasmodel.exit_codes import (
    EXIT_AMBIGUOUS_RESPONSE_KEY,
    EXIT_CONSTRAINT_VIOLATION,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SHAPE_MISMATCH,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNRESOLVED_REFERENCE,
)


class OasModelError(Exception):
    """Base exception for all oasmodel errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`oasmodel.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(OasModelError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(OasModelError):
    """Raised when a document cannot be read or is not OpenAPI 3.x."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ConfigError(OasModelError):
    """Raised for configuration problems (invalid JSON, unknown keys, bad values)."""

    exit_code = EXIT_GENERIC_FAILURE


class ModelError(OasModelError):
    """Base class for errors found while reading a value against the model.

    Args:
        message: Human-readable summary.
        location: Dotted path to the offending value, e.g.
            ``paths./records.get.parameters[0].name``.
        issues: Every :class:`~oasmodel.validation.ValidationIssue` that
            was collected alongside this one. Empty when the error was
            raised for a single problem.
    """

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        issues: Optional[list[Any]] = None,
    ):
        super().__init__(message)
        self.location = location
        self.issues: list[Any] = list(issues or [])


class ShapeMismatchError(ModelError):
    """A value has the wrong primitive kind or lacks a required field."""

    exit_code = EXIT_SHAPE_MISMATCH


class ConstraintViolationError(ModelError):
    """A structurally valid value breaks a cross-field invariant.

    Examples: a path parameter with ``required: false``, a schema marked
    both ``readOnly`` and ``writeOnly``, or a duplicated ``operationId``.
    """

    exit_code = EXIT_CONSTRAINT_VIOLATION


class UnresolvedReferenceError(ModelError):
    """A ``$ref`` string does not point at an existing value."""

    exit_code = EXIT_UNRESOLVED_REFERENCE


class CyclicReferenceError(UnresolvedReferenceError):
    """Following a chain of ``$ref`` pointers revisits a reference."""


class AmbiguousResponseKeyError(ModelError):
    """A responses map key is not a status code, a ``NXX`` range or ``default``."""

    exit_code = EXIT_AMBIGUOUS_RESPONSE_KEY
