"""
Entity ↔ document mapping.

Converts dataclass entities to plain document dicts and back:
- ``id`` is stored as ``_id`` (the document key)
- nested dataclasses (logins, claims) become embedded dicts
- type hints drive reconstruction, so subclasses with extra fields
  round-trip without custom code
"""

from dataclasses import fields, is_dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from identity_docstore.domain.shared.errors import InvalidArgumentError

ID_FIELD = "_id"

TEntity = TypeVar("TEntity")


def collection_name_for(entity_type: Type[Any]) -> str:
    """
    Resolve collection name from the ``COLLECTION_NAME`` class attribute.

    Raises:
        InvalidArgumentError: If the type declares no collection
    """
    name = getattr(entity_type, "COLLECTION_NAME", None)
    if not name:
        raise InvalidArgumentError(
            "entity_type", f"{entity_type.__name__} does not declare COLLECTION_NAME"
        )
    return str(name)


def to_document(entity: Any) -> Dict[str, Any]:
    """
    Convert entity to document dict.

    Args:
        entity: Dataclass instance with an ``id`` field

    Returns:
        Document with ``_id`` plus one key per field
    """
    if not is_dataclass(entity) or isinstance(entity, type):
        raise InvalidArgumentError("entity", f"Not a dataclass instance: {entity!r}")

    document: Dict[str, Any] = {ID_FIELD: getattr(entity, "id", None)}
    for f in fields(entity):
        if f.name == "id":
            continue
        document[f.name] = _encode(getattr(entity, f.name))
    return document


def from_document(entity_type: Type[TEntity], document: Mapping[str, Any]) -> TEntity:
    """
    Convert document dict to entity.

    Fields missing from the document fall back to the dataclass defaults;
    unknown document keys are ignored.
    """
    hints = get_type_hints(entity_type)
    kwargs: Dict[str, Any] = {}
    for f in fields(entity_type):  # type: ignore[arg-type]
        if not f.init:
            continue
        if f.name == "id":
            kwargs["id"] = document.get(ID_FIELD)
            continue
        if f.name not in document:
            continue
        kwargs[f.name] = _decode(hints.get(f.name, Any), document[f.name])
    return entity_type(**kwargs)


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _encode(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    return value


def _decode(hint: Any, value: Any) -> Any:
    if value is None:
        return None

    origin = get_origin(hint)
    args = get_args(hint)

    if origin is Union:
        candidates = [arg for arg in args if arg is not type(None)]
        if len(candidates) == 1:
            return _decode(candidates[0], value)
        return value

    if origin in (list, List):
        item_hint = args[0] if args else Any
        return [_decode(item_hint, item) for item in value]

    if isinstance(hint, type) and is_dataclass(hint) and isinstance(value, Mapping):
        nested_hints = get_type_hints(hint)
        return hint(
            **{
                f.name: _decode(nested_hints.get(f.name, Any), value[f.name])
                for f in fields(hint)
                if f.init and f.name in value
            }
        )

    if hint is datetime and isinstance(value, str):
        return datetime.fromisoformat(value)

    return value
