"""Turn object-model values into plain data, JSON text or YAML text.

The wire contract every function here honours:

* keys are the OpenAPI wire names (``operationId``, ``in``, ``$ref``, ...);
* absent optional fields are omitted, never written as ``null``;
* vendor extensions are written inline next to the fixed fields;
* responses keys stay strings (``"200"``, ``"2XX"``, ``"default"``).

The inverse direction lives in :mod:`oasmodel.parser.loader`.
"""

from __future__ import annotations

import json
from typing import Any

import yaml
from pydantic import BaseModel


def to_dict(value: BaseModel) -> Any:
    """Return *value* as JSON-compatible Python data.

    Fields never set are left out, and so is any field holding ``None``
    other than the arbitrary-JSON ones (``example``, ``default``,
    ``value``), where an explicitly set ``None`` is written as ``null``.

    Args:
        value: Any model from :mod:`oasmodel.models` (usually an
            :class:`~oasmodel.models.OpenAPI` document).

    Returns:
        A ``dict`` for object models, or the root value for ``RootModel``
        maps such as :class:`~oasmodel.models.Responses`.
    """
    return value.model_dump(mode="json", by_alias=True, exclude_unset=True)


def to_json(value: BaseModel, indent: int | None = 2) -> str:
    """Serialise *value* as JSON text.

    Args:
        value: The model to serialise.
        indent: Indentation width; ``None`` produces compact output.
    """
    return json.dumps(to_dict(value), indent=indent, ensure_ascii=False)


def to_yaml(value: BaseModel, indent: int = 2) -> str:
    """Serialise *value* as YAML text.

    Key order follows field declaration order. String keys that look like
    numbers (status codes) are quoted by the emitter so they read back as
    strings.
    """
    return yaml.safe_dump(
        to_dict(value),
        indent=indent,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
