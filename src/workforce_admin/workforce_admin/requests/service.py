from __future__ import annotations

import logging
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Mapping, Optional, Sequence

from ..common.validators import require_positive_id
from ..core.enums import EntityTag, RequestAction, RequestStatus, Role
from ..core.exceptions import ConflictReplayError, NotFoundError, ValidationError
from ..core.permissions import Operation, require_role
from .model import ChangeRequest
from .registry import EntityRegistry
from .repository import ChangeRequestRepository

logger = logging.getLogger(__name__)

UnitOfWork = Callable[[], ContextManager[Any]]


def parse_request_status(value: Any) -> Optional[RequestStatus]:
    if value is None or value == "":
        return None
    try:
        return RequestStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError("status must be PENDING, APPROVED or REJECTED")


class ChangeRequestService:
    """Submit, list and decide change requests.

    Approval is one unit of work: lock the request, apply the mutation to the
    target row, then flip PENDING -> APPROVED. Any failure rolls everything
    back and the request stays PENDING.
    """

    def __init__(
        self,
        requests: ChangeRequestRepository,
        registry: EntityRegistry,
        *,
        unit_of_work: Optional[UnitOfWork] = None,
    ):
        self._requests = requests
        self._registry = registry
        self._uow = unit_of_work or nullcontext

    def submit(
        self,
        *,
        table_name: EntityTag | str,
        row_id: Any,
        action: RequestAction | str,
        requester_id: int,
        actor_role: Role,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> ChangeRequest:
        require_role(Operation.CHANGE_REQUEST_SUBMIT, actor_role)
        tag, act, handler = self._registry.resolve(table_name, action)
        rid = require_positive_id(row_id, "row_id")

        stored: Optional[dict] = None
        if act == RequestAction.EDIT:
            if not isinstance(payload, Mapping) or not payload:
                raise ValidationError("EDIT requests need a non-empty payload")
            # Validate now; the raw payload is stored and coerced again on approval.
            handler.coerce_patch(payload)
            stored = dict(payload)

        if not handler.exists(rid):
            raise NotFoundError(f"{tag.value} row {rid} not found")

        request_id = self._requests.create(
            table_name=tag,
            row_id=rid,
            action=act,
            requester_id=int(requester_id),
            payload=stored,
        )
        logger.info(
            "change request %s submitted: %s %s/%s by user %s", request_id, act.value, tag.value, rid, requester_id
        )
        return self._require(request_id)

    def list(self, *, actor_role: Role, actor_id: int, status: Any = None) -> Sequence[ChangeRequest]:
        role = require_role(Operation.CHANGE_REQUEST_LIST, actor_role)
        requester = None if role == Role.ADMIN else int(actor_id)
        return self._requests.list(requester_id=requester, status=parse_request_status(status))

    def approve(self, *, request_id: Any, actor_role: Role, actor_id: int) -> ChangeRequest:
        require_role(Operation.CHANGE_REQUEST_DECIDE, actor_role)
        rid = require_positive_id(request_id, "request_id")

        with self._uow():
            req = self._lock_pending(rid)
            tag, act, handler = self._registry.resolve(req.table_name, req.action)

            if act == RequestAction.DELETE:
                if not handler.delete(req.row_id):
                    raise NotFoundError(f"{tag.value} row {req.row_id} no longer exists")
            else:
                fields = handler.coerce_patch(req.payload or {})
                if handler.update(req.row_id, fields) is False:
                    raise NotFoundError(f"{tag.value} row {req.row_id} no longer exists")

            if not self._requests.decide(request_id=rid, status=RequestStatus.APPROVED, decided_by=int(actor_id)):
                raise ConflictReplayError(f"Change request {rid} was already decided")
            decided = self._require(rid)

        logger.info("change request %s approved by user %s: %s %s/%s", rid, actor_id, act.value, tag.value, req.row_id)
        return decided

    def reject(self, *, request_id: Any, actor_role: Role, actor_id: int) -> ChangeRequest:
        require_role(Operation.CHANGE_REQUEST_DECIDE, actor_role)
        rid = require_positive_id(request_id, "request_id")

        with self._uow():
            self._lock_pending(rid)
            if not self._requests.decide(request_id=rid, status=RequestStatus.REJECTED, decided_by=int(actor_id)):
                raise ConflictReplayError(f"Change request {rid} was already decided")
            decided = self._require(rid)

        logger.info("change request %s rejected by user %s", rid, actor_id)
        return decided

    def _lock_pending(self, request_id: int) -> ChangeRequest:
        req = self._requests.get(request_id, for_update=True)
        if not req:
            raise NotFoundError(f"Change request {request_id} not found")
        if req.status != RequestStatus.PENDING:
            logger.warning("change request %s replayed while %s", request_id, req.status.value)
            raise ConflictReplayError(f"Change request {request_id} is already {req.status.value}")
        return req

    def _require(self, request_id: int) -> ChangeRequest:
        req = self._requests.get(request_id)
        if not req:
            raise NotFoundError(f"Change request {request_id} not found")
        return req
