"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oasmodel.exceptions.OasModelError` subclass.
CI scripts can inspect the exit code of ``oasmodel validate`` to tell a
broken document apart from an unreadable one without parsing stderr.

Example::

    $ oasmodel validate openapi.yaml
    $ echo $?
    9   # EXIT_CONSTRAINT_VIOLATION -- e.g. a path parameter not marked required
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The document could not be read, or is not an OpenAPI 3.x document."""

EXIT_SHAPE_MISMATCH = 8
"""A value does not match the shape declared by the object model."""

EXIT_CONSTRAINT_VIOLATION = 9
"""A structurally valid document breaks a cross-field rule."""

EXIT_UNRESOLVED_REFERENCE = 10
"""A ``$ref`` does not resolve, or a chain of references loops."""

EXIT_AMBIGUOUS_RESPONSE_KEY = 11
"""A responses map holds a key that is not a status code, range or ``default``."""
