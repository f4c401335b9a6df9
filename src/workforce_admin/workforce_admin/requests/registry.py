"""Which entities the change request workflow can touch, and how.

The registry is built once by the container. Each handler exposes plain
callables so the approval path never needs to know which table it is
mutating.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from ..core.enums import EntityTag, RequestAction
from ..core.exceptions import ValidationError

Fields = Dict[str, Any]


@dataclass(frozen=True)
class EntityHandler:
    exists: Callable[[int], bool]
    delete: Callable[[int], bool]
    update: Optional[Callable[[int, Fields], Any]] = None
    coerce_patch: Optional[Callable[[Mapping[str, Any]], Fields]] = None

    def supports(self, action: RequestAction) -> bool:
        if action == RequestAction.DELETE:
            return True
        return self.update is not None and self.coerce_patch is not None


class EntityRegistry:
    def __init__(self, handlers: Mapping[EntityTag, EntityHandler]):
        self._handlers: Dict[EntityTag, EntityHandler] = dict(handlers)

    def tags(self) -> list[EntityTag]:
        return list(self._handlers)

    def resolve(self, table_name: Union[EntityTag, str], action: Union[RequestAction, str]) -> tuple[EntityTag, RequestAction, EntityHandler]:
        """Map raw (table, action) to a handler, or raise ValidationError."""

        if isinstance(table_name, EntityTag):
            tag = table_name
        else:
            try:
                tag = EntityTag.parse(table_name)
            except ValueError:
                raise ValidationError(f"Unsupported table {table_name!r}")

        if isinstance(action, RequestAction):
            act = action
        else:
            try:
                act = RequestAction(str(action or "").strip().upper())
            except ValueError:
                raise ValidationError("action must be EDIT or DELETE")

        handler = self._handlers.get(tag)
        if handler is None:
            raise ValidationError(f"Unsupported table {tag.value!r}")
        if not handler.supports(act):
            raise ValidationError(f"{act.value} is not supported for {tag.value}")
        return tag, act, handler
