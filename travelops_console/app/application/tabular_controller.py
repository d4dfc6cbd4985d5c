from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from enum import Enum
from typing import Any

from travelops_console.app.application.fetcher import RemoteCollectionFetcher, report_failure
from travelops_console.app.application.mutation_attempts import (
    MutationTracker,
    create_operation,
    delete_operation,
    update_operation,
)
from travelops_console.app.application.query_state import DerivedView, QueryState
from travelops_console.app.infrastructure.logging.logger import get_logger, log_action
from travelops_console.app.ui.components.notification_center import NotificationCenter
from travelops_console.app.ui.filters import filter_rows
from travelops_console.app.ui.forms import FormResult, FormState, build_form_state, ensure_valid
from travelops_console.app.ui.pagination import clamp_page, count_pages, paginate
from travelops_console.app.ui.sorting import ComparatorRegistry, SortOrder, coerce_order, sort_rows, toggle_order
from travelops_console.clients.travelops_sdk.collection_client import CollectionClient
from travelops_console.clients.travelops_sdk.errors import ApiError, ValidationError

Record = dict[str, Any]
ViewListener = Callable[[DerivedView], None]
Placement = Callable[[list[Record], Record], int]

PROVISIONAL_PREFIX = "tmp-"


class ControllerStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    MUTATING = "mutating"
    ERROR = "error"


_TRANSITIONS = {
    ControllerStatus.IDLE: {ControllerStatus.LOADING},
    ControllerStatus.LOADING: {ControllerStatus.LOADING, ControllerStatus.READY, ControllerStatus.ERROR},
    ControllerStatus.READY: {ControllerStatus.LOADING, ControllerStatus.MUTATING},
    ControllerStatus.MUTATING: {ControllerStatus.READY},
    ControllerStatus.ERROR: {ControllerStatus.IDLE, ControllerStatus.LOADING},
}


FormValidator = Callable[[dict[str, Any]], FormResult]


class TabularDataController:
    """Source collection plus query state; every change republishes a derived page of rows.

    Mutations are optimistic: the source collection changes before the API call
    and is reconciled with the server record on success or rebuilt from the
    last confirmed value plus the changes still in flight on failure. Failures
    end as one error notification and never propagate to the caller.
    """

    def __init__(
        self,
        client: CollectionClient,
        *,
        module: str,
        search_fields: Sequence[str],
        registry: ComparatorRegistry,
        notifications: NotificationCenter | None = None,
        page_size: int = 10,
        sort_key: str | None = None,
        sort_order: SortOrder | str = SortOrder.ASC,
        logger: logging.Logger | None = None,
        validator: FormValidator | None = None,
    ) -> None:
        self.client = client
        self.module = module
        self.search_fields = list(search_fields)
        self.registry = registry
        self.validator = validator
        self.notifications = notifications or NotificationCenter()
        self.logger = logger or get_logger("travelops_console.controller")
        self.fetcher = RemoteCollectionFetcher(
            client,
            self.notifications,
            module,
            logger=self.logger,
            is_active=lambda: not self._disposed,
        )
        self.tracker = MutationTracker()
        self.status = ControllerStatus.IDLE
        self.last_error: Exception | None = None
        self.field_errors: dict[str, str] = {}
        self._query = QueryState(page_size=page_size, sort_key=sort_key, sort_order=coerce_order(sort_order))
        self._records: list[Record] = []
        self._view = DerivedView.empty()
        self._listeners: list[ViewListener] = []
        self._pending_mutations = 0
        self._disposed = False

    # -- read side -------------------------------------------------------

    @property
    def query(self) -> QueryState:
        return self._query

    @property
    def view(self) -> DerivedView:
        return self._view

    @property
    def records(self) -> tuple[Record, ...]:
        return tuple(self._records)

    @property
    def busy(self) -> bool:
        return self.tracker.is_busy()

    def is_busy(self, operation: str) -> bool:
        return self.tracker.is_busy(operation)

    def ordered_rows(self) -> list[Record]:
        """Filtered and sorted rows across all pages."""
        filtered = filter_rows(self._records, self._query.search_text, self.search_fields)
        return sort_rows(filtered, self._query.sort_key, self._query.sort_order, self.registry)

    def subscribe(self, listener: ViewListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()

    # -- query state -----------------------------------------------------

    def set_search_text(self, text: str) -> DerivedView:
        self._query = self._query.replace(search_text=text or "", page=1)
        return self.recompute()

    def set_sort_key(self, key: str | None) -> DerivedView:
        self._query = self._query.replace(sort_key=key, page=1)
        return self.recompute()

    def set_sort_order(self, order: SortOrder | str) -> DerivedView:
        self._query = self._query.replace(sort_order=coerce_order(order))
        return self.recompute()

    def toggle_sort(self, key: str) -> DerivedView:
        if key == self._query.sort_key:
            return self.set_sort_order(toggle_order(self._query.sort_order))
        self._query = self._query.replace(sort_key=key, sort_order=SortOrder.ASC, page=1)
        return self.recompute()

    def set_page(self, page: int) -> DerivedView:
        self._query = self._query.replace(page=max(1, int(page)))
        return self.recompute()

    def recompute(self) -> DerivedView:
        ordered = self.ordered_rows()
        total_pages = count_pages(len(ordered), self._query.page_size)
        page = clamp_page(self._query.page, total_pages)
        if page != self._query.page:
            self._query = self._query.replace(page=page)
        current = paginate(ordered, page, self._query.page_size)
        self._view = DerivedView(
            visible_rows=tuple(current.rows),
            total_pages=total_pages,
            total_count=len(ordered),
            page=page,
        )
        for listener in list(self._listeners):
            listener(self._view)
        return self._view

    # -- loading ---------------------------------------------------------

    async def load(self, params: dict[str, Any] | None = None) -> bool:
        if self.status is ControllerStatus.MUTATING:
            raise RuntimeError(f"{self.module}: cannot reload while mutations are in flight")
        self._transition(ControllerStatus.LOADING)
        try:
            rows = await self.fetcher.fetch(params)
        except ApiError as error:
            if self._disposed:
                return False
            self.last_error = error
            if self.status is ControllerStatus.LOADING:
                self._transition(ControllerStatus.ERROR)
                self._transition(ControllerStatus.IDLE)
            return False
        except Exception:
            if self.status is ControllerStatus.LOADING:
                self._transition(ControllerStatus.ERROR)
                self._transition(ControllerStatus.IDLE)
            raise
        if self._disposed:
            return False
        self.last_error = None
        self._records = list(rows)
        if self.status is ControllerStatus.LOADING:
            self._transition(ControllerStatus.READY)
        self.recompute()
        return True

    # -- mutations -------------------------------------------------------

    def create_form_state(self, values: dict[str, Any], validator: FormValidator | None = None) -> FormState:
        """Submit gating for the create form: disabled while invalid or while a create is in flight."""
        validator = validator or self.validator
        result = validator(values) if validator is not None else FormResult(values=dict(values), field_errors={})
        return build_form_state(result, submitting=self.is_busy(create_operation()))

    async def create(self, values: dict[str, Any], validator: FormValidator | None = None) -> Record | None:
        self._require_loaded("create")
        self.field_errors = {}
        validator = validator or self.validator
        if validator is not None:
            try:
                values = ensure_valid(validator(values))
            except ValidationError as error:
                self.field_errors = error.field_errors
                log_action(self.logger, self.module, "create", "invalid", fields=sorted(error.field_errors))
                return None

        operation = create_operation()
        if not self.tracker.begin(operation):
            log_action(self.logger, self.module, "create", "ignored_in_flight")
            return None

        provisional_id = f"{PROVISIONAL_PREFIX}{uuid.uuid4().hex}"
        self._records.append({**values, "id": provisional_id})
        self._enter_mutation()
        self.recompute()
        try:
            created = await self.client.create_record(values)
        except ApiError as error:
            if not self._disposed:
                self._remove(provisional_id)
                self.recompute()
                report_failure(self.logger, self.notifications, self.module, "create", error)
            return None
        except Exception:
            if not self._disposed:
                self._remove(provisional_id)
                self.recompute()
            raise
        finally:
            self.tracker.end(operation)
            self._leave_mutation()

        if self._disposed:
            return None
        index = self._index_of(provisional_id)
        if index is None:
            self._records.append(created)
        else:
            self._records[index] = created
        self.recompute()
        log_action(self.logger, self.module, "create", "success", record_id=created["id"])
        self.notifications.success("Created", f"{self.module} record added")
        return created

    async def update_field(self, record_id: Any, field: str, value: Any) -> Record | None:
        return await self.update_fields(record_id, {field: value})

    async def update_fields(
        self,
        record_id: Any,
        changes: dict[str, Any],
        place: Placement | None = None,
        operation: str | None = None,
    ) -> Record | None:
        """Optimistically apply ``changes``; ``place`` picks a new position for the changed record."""
        self._require_loaded("update")
        index = self._index_of(record_id)
        if index is None:
            self.report_missing("update", record_id)
            return None

        operation = operation or update_operation(record_id, ",".join(sorted(changes)))
        if not self.tracker.begin(operation):
            log_action(self.logger, self.module, "update", "ignored_in_flight", record_id=record_id)
            return None

        current = self._records[index]
        changed = {**current, **changes}
        if place is None:
            self._records[index] = changed
        else:
            remaining = self._records[:index] + self._records[index + 1 :]
            remaining.insert(place(remaining, changed), changed)
            self._records = remaining
        sequence = self.tracker.track(record_id, current, changes, origin=None if place is None else index)
        self._enter_mutation()
        self.recompute()
        try:
            updated = await self.client.update_record(record_id, changes)
        except ApiError as error:
            if not self._disposed:
                self._roll_back(record_id, sequence)
                report_failure(self.logger, self.notifications, self.module, "update", error, record_id=record_id)
            return None
        except Exception:
            if not self._disposed:
                self._roll_back(record_id, sequence)
            raise
        finally:
            self.tracker.end(operation)
            self._leave_mutation()

        if self._disposed:
            return None
        if not self.tracker.is_latest(record_id, sequence):
            self.tracker.accept(record_id, sequence)
            log_action(self.logger, self.module, "update", "stale_response_dropped", record_id=record_id)
            return None
        self.tracker.accept(record_id, sequence, server_record=updated)
        position = self._index_of(record_id)
        if position is not None:
            self._records[position] = updated
            self.recompute()
        log_action(self.logger, self.module, "update", "success", record_id=record_id, fields=sorted(changes))
        self.notifications.success("Updated", f"{self.module} record updated")
        return updated

    async def delete(self, record_id: Any) -> bool:
        self._require_loaded("delete")
        index = self._index_of(record_id)
        if index is None:
            self.report_missing("delete", record_id)
            return False

        operation = delete_operation(record_id)
        if not self.tracker.begin(operation):
            log_action(self.logger, self.module, "delete", "ignored_in_flight", record_id=record_id)
            return False

        removed = self._records.pop(index)
        sequence = self.tracker.track(record_id, removed, {}, origin=index, removes=True)
        self._enter_mutation()
        self.recompute()
        try:
            await self.client.delete_record(record_id)
        except ApiError as error:
            if not self._disposed:
                self._roll_back(record_id, sequence)
                report_failure(self.logger, self.notifications, self.module, "delete", error, record_id=record_id)
            return False
        except Exception:
            if not self._disposed:
                self._roll_back(record_id, sequence)
            raise
        finally:
            self.tracker.end(operation)
            self._leave_mutation()

        if self._disposed:
            return False
        self.tracker.forget(record_id)
        log_action(self.logger, self.module, "delete", "success", record_id=record_id)
        self.notifications.success("Deleted", f"{self.module} record removed")
        return True

    def report_missing(self, action: str, record_id: Any) -> None:
        """The record is gone from the source collection, usually after a reload or a delete."""
        log_action(self.logger, self.module, action, "not_found", record_id=record_id, level=logging.WARNING)
        self.notifications.push(
            level="error",
            title="Not found",
            message=f"{self.module} record {record_id} no longer exists",
            details={"code": "NOT_FOUND", "action": action},
        )

    # -- internals -------------------------------------------------------

    def _roll_back(self, record_id: Any, sequence: int) -> None:
        """Rebuilds the record from its last confirmed value plus the changes still in flight."""
        rejected = self.tracker.reject(record_id, sequence)
        if rejected is None:
            return
        restored, change = rejected
        position = self._index_of(record_id)
        if position is None:
            if change is None or not change.removes:
                return
            self._records.insert(min(change.origin or 0, len(self._records)), restored)
        elif change is not None and change.origin is not None and not change.removes:
            del self._records[position]
            self._records.insert(min(change.origin, len(self._records)), restored)
        else:
            self._records[position] = restored
        self.recompute()

    def _index_of(self, record_id: Any) -> int | None:
        for index, record in enumerate(self._records):
            if record.get("id") == record_id:
                return index
        return None

    def _remove(self, record_id: Any) -> None:
        index = self._index_of(record_id)
        if index is not None:
            del self._records[index]

    def _require_loaded(self, action: str) -> None:
        if self.status not in {ControllerStatus.READY, ControllerStatus.MUTATING}:
            raise RuntimeError(f"{self.module}: cannot {action} while {self.status.value}")

    def _enter_mutation(self) -> None:
        self._pending_mutations += 1
        if self.status is ControllerStatus.READY:
            self._transition(ControllerStatus.MUTATING)

    def _leave_mutation(self) -> None:
        self._pending_mutations = max(0, self._pending_mutations - 1)
        if self._pending_mutations == 0 and self.status is ControllerStatus.MUTATING:
            self._transition(ControllerStatus.READY)

    def _transition(self, target: ControllerStatus) -> None:
        if target not in _TRANSITIONS[self.status]:
            raise RuntimeError(f"{self.module}: illegal transition {self.status.value} -> {target.value}")
        self.status = target
