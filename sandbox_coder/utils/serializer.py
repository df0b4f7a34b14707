"""Conversions between step/tool results and JSON.

Stored step outputs are plain JSON. A Pydantic result is stored as its dump
together with its dotted class path, so replay can hand back the same type.
"""

import importlib
import json
from typing import Any

from pydantic import BaseModel

_LIST_PREFIX = "list["


def _not_serializable(obj: Any) -> TypeError:
    return TypeError(
        f"Object of type {type(obj).__name__} is not JSON serializable; "
        "return JSON-compatible data or a Pydantic model"
    )


def _class_path(cls: type) -> str:
    return f"{cls.__module__}.{cls.__name__}"


def is_json_serializable(obj: Any) -> bool:
    try:
        json.dumps(obj)
    except (TypeError, ValueError):
        return False
    return True


def serialize(obj: Any) -> Any:
    """Turn a result into JSON-compatible data.

    Raises:
        TypeError: If ``obj`` is neither a Pydantic model nor JSON-compatible
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if not is_json_serializable(obj):
        raise _not_serializable(obj)
    return obj


def json_serialize(obj: Any) -> str:
    """Render a tool result as the text the model sees.

    Strings pass through unchanged so command output is not wrapped in quotes.
    """
    if isinstance(obj, str):
        return obj
    if isinstance(obj, BaseModel):
        return obj.model_dump_json()
    try:
        return json.dumps(obj)
    except (TypeError, ValueError) as e:
        raise _not_serializable(obj) from e


def safe_serialize(value: Any) -> Any:
    """Like ``serialize`` but never fails; used for span attributes."""
    try:
        return serialize(value)
    except (TypeError, ValueError):
        return f"<{getattr(value, '__name__', type(value).__name__)}>"


def schema_name_for(obj: Any) -> str | None:
    """Class path recorded next to a stored output, or None for plain data."""
    if isinstance(obj, BaseModel):
        return _class_path(type(obj))
    if isinstance(obj, list) and obj and isinstance(obj[0], BaseModel):
        return f"{_LIST_PREFIX}{_class_path(type(obj[0]))}]"
    return None


def _load_model_class(path: str) -> type[BaseModel]:
    module_name, _, class_name = path.rpartition(".")
    model_class = getattr(importlib.import_module(module_name), class_name)
    if not (isinstance(model_class, type) and issubclass(model_class, BaseModel)):
        raise TypeError(f"{path} is not a Pydantic model")
    return model_class


def deserialize(obj: Any, output_schema_name: str | None = None) -> Any:
    """Rebuild a stored output.

    Args:
        obj: Stored JSON value
        output_schema_name: ``"pkg.module.Class"`` or ``"list[pkg.module.Class]"``,
            as produced by ``schema_name_for``

    Raises:
        ValueError: If the recorded class cannot be loaded or rejects the data
    """
    if not output_schema_name:
        return obj

    try:
        if output_schema_name.startswith(_LIST_PREFIX) and isinstance(obj, list):
            model_class = _load_model_class(output_schema_name[len(_LIST_PREFIX) : -1])
            return [model_class.model_validate(item) for item in obj]
        if isinstance(obj, dict):
            return _load_model_class(output_schema_name).model_validate(obj)
    except (ImportError, AttributeError, ValueError, TypeError) as e:
        raise ValueError(
            f"Failed to reconstruct stored output as {output_schema_name}: {e}"
        ) from e
    return obj
