"""Finding-state store: immutable snapshots behind path-addressed setters.

A store owns the current snapshot of one organ module's findings. Every write
goes through ``set``/``toggle``/``update``, which coerce the value to the
field's type, run the module's normalizers and notify listeners. Values never
raise: a categorical value that matches no choice is ignored and logged.
"""

import logging
import typing
from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError

from radclean.errors import UnknownFieldError

logger = logging.getLogger(__name__)

Normalizer = Callable[[BaseModel, str], BaseModel]
Listener = Callable[[BaseModel], None]

_BOOL = TypeAdapter(bool)


class _Ignored(Exception):
    """Internal signal: the value cannot be coerced to the field type."""


def _is_class(annotation: Any, base: type) -> bool:
    # Parametrized generics such as frozenset[X] are not classes
    return typing.get_origin(annotation) is None and isinstance(annotation, type) and issubclass(annotation, base)


def _is_group(annotation: Any) -> bool:
    return _is_class(annotation, BaseModel)


def coerce_enum(enum_cls: type[Enum], value: Any) -> Enum:
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text == member.value:
            return member
    lowered = text.lower()
    for member in enum_cls:
        if lowered == str(member.value).lower() or lowered == member.name.lower():
            return member
    raise _Ignored(f"{value!r} is not one of {[m.value for m in enum_cls]}")


def _coerce(annotation: Any, value: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is frozenset:
        (item_type,) = typing.get_args(annotation)
        if isinstance(value, str):
            value = [v for v in (p.strip() for p in value.split(",")) if v]
        if not isinstance(value, Iterable):
            raise _Ignored(f"{value!r} is not a collection")
        return frozenset(_coerce(item_type, v) for v in value)
    if _is_class(annotation, Enum):
        return coerce_enum(annotation, value)
    if annotation is bool:
        try:
            return _BOOL.validate_python(value)
        except ValidationError as e:
            raise _Ignored(str(e)) from e
    if annotation is str:
        return "" if value is None else str(value)
    raise _Ignored(f"unsupported field type {annotation!r}")


def field_annotation(state_cls: type[BaseModel], path: str) -> Any:
    """Resolve the annotation behind ``field`` or ``group.field``."""
    head, _, tail = path.partition(".")
    info = state_cls.model_fields.get(head)
    if info is None:
        raise UnknownFieldError(path, state_cls.__name__)
    annotation = info.annotation
    if not tail:
        if _is_group(annotation):
            raise UnknownFieldError(path, state_cls.__name__)
        return annotation
    if not _is_group(annotation) or "." in tail:
        raise UnknownFieldError(path, state_cls.__name__)
    sub = annotation.model_fields.get(tail)
    if sub is None:
        raise UnknownFieldError(path, state_cls.__name__)
    return sub.annotation


def field_paths(state_cls: type[BaseModel]) -> list[str]:
    """Every settable path on a state model, groups expanded."""
    paths: list[str] = []
    for name, info in state_cls.model_fields.items():
        annotation = info.annotation
        if _is_group(annotation):
            paths.extend(f"{name}.{sub}" for sub in annotation.model_fields)
        else:
            paths.append(name)
    return paths


def read_path(state: BaseModel, path: str) -> Any:
    head, _, tail = path.partition(".")
    value = getattr(state, head)
    return getattr(value, tail) if tail else value


def write_path(state: BaseModel, path: str, value: Any) -> BaseModel:
    head, _, tail = path.partition(".")
    if not tail:
        return state.model_copy(update={head: value})
    group = getattr(state, head).model_copy(update={tail: value})
    return state.model_copy(update={head: group})


class FindingStore:
    def __init__(self, state_cls: type[BaseModel], normalizers: Iterable[Normalizer] = ()):
        self.state_cls = state_cls
        self.normalizers = tuple(normalizers)
        self._state = state_cls()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> BaseModel:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set(self, path: str, value: Any) -> bool:
        """Replace one field. Returns False when the value was ignored."""
        annotation = field_annotation(self.state_cls, path)
        try:
            coerced = _coerce(annotation, value)
        except _Ignored as e:
            logger.warning("Ignoring value for %s.%s: %s", self.state_cls.__name__, path, e)
            return False
        self._commit(path, coerced)
        return True

    def toggle(self, path: str, item: Any) -> bool:
        """Add or remove one member of a multi-select field; flip a boolean field."""
        annotation = field_annotation(self.state_cls, path)
        if annotation is bool:
            self._commit(path, not read_path(self._state, path))
            return True
        if typing.get_origin(annotation) is not frozenset:
            logger.warning("Cannot toggle %s.%s: not a multi-select field", self.state_cls.__name__, path)
            return False
        (item_type,) = typing.get_args(annotation)
        try:
            member = _coerce(item_type, item)
        except _Ignored as e:
            logger.warning("Ignoring toggle for %s.%s: %s", self.state_cls.__name__, path, e)
            return False
        current: frozenset = read_path(self._state, path)
        self._commit(path, current - {member} if member in current else current | {member})
        return True

    def update(self, patch: Mapping[str, Any]) -> bool:
        """Apply several setters in order. Returns True when every value was accepted."""
        accepted = True
        for path, value in patch.items():
            accepted = self.set(path, value) and accepted
        return accepted

    def reset(self) -> None:
        self._state = self.state_cls()
        logger.debug("Reset %s to defaults", self.state_cls.__name__)
        self._notify()

    def _commit(self, path: str, value: Any) -> None:
        new_state = write_path(self._state, path, value)
        for normalize in self.normalizers:
            new_state = normalize(new_state, path)
        if new_state == self._state:
            return
        self._state = new_state
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Finding-state listener %r failed", listener)
