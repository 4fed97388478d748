"""Built-in CLI sub-commands for oasmodel.

This package groups all Typer sub-command modules that form the CLI's
top-level command tree:

* :mod:`~oasmodel.commands.validate` -- check a document and list issues.
* :mod:`~oasmodel.commands.convert` -- re-emit a document as YAML or JSON.
* :mod:`~oasmodel.commands.inspect` -- tables of paths, schemas, security
  schemes and document info.
* :mod:`~oasmodel.commands.example` -- print a small sample document.
* :mod:`~oasmodel.commands.config` -- view and modify user settings.

Each module either exports a :class:`typer.Typer` sub-application (for
multi-command groups like ``inspect`` and ``config``) or a plain callback
function registered directly on the root app (for single commands like
``validate``). Shared helpers live in :mod:`~oasmodel.commands.common`.
"""
