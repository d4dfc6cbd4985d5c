import asyncio
import logging

from travelops_console.app.application.tabular_controller import ControllerStatus, TabularDataController
from travelops_console.app.ui.components.notification_center import NotificationCenter
from travelops_console.app.ui.forms import validate_manager_form
from travelops_console.app.ui.sorting import ComparatorRegistry
from travelops_console.clients.travelops_sdk.errors import NetworkError, ServerError

BOOKINGS = [
    {"id": "b-1", "customerName": "Ravi", "status": "pending"},
    {"id": "b-2", "customerName": "Meera", "status": "confirmed"},
    {"id": "b-3", "customerName": "Anu", "status": "pending"},
]


class FakeCollectionClient:
    """In-memory collection endpoint; ``gates`` hold responses until released, ``failures`` raise instead."""

    def __init__(self, rows) -> None:
        self.rows = [dict(row) for row in rows]
        self.calls: list[tuple] = []
        self.gates: list[asyncio.Event | None] = []
        self.failures: list[Exception | None] = []
        self._next_id = 100

    async def list_records(self, params=None):
        self.calls.append(("list",))
        return [dict(row) for row in self.rows]

    async def create_record(self, values):
        self.calls.append(("create", values))
        await self._respond()
        self._next_id += 1
        record = {**values, "id": f"b-{self._next_id}"}
        self.rows.append(record)
        return dict(record)

    async def update_record(self, record_id, fields):
        self.calls.append(("update", record_id, fields))
        await self._respond()
        stored = next(row for row in self.rows if row["id"] == record_id)
        stored.update(fields)
        return dict(stored)

    async def delete_record(self, record_id):
        self.calls.append(("delete", record_id))
        await self._respond()
        self.rows = [row for row in self.rows if row["id"] != record_id]

    async def _respond(self) -> None:
        gate = self.gates.pop(0) if self.gates else None
        failure = self.failures.pop(0) if self.failures else None
        if gate is not None:
            await gate.wait()
        if failure is not None:
            raise failure


def _controller(client: FakeCollectionClient) -> tuple[TabularDataController, NotificationCenter]:
    notifications = NotificationCenter()
    controller = TabularDataController(
        client,
        module="bookings",
        search_fields=["customerName", "status"],
        registry=ComparatorRegistry.for_fields(["customerName", "status"]),
        notifications=notifications,
        page_size=10,
    )
    return controller, notifications


def _server_error(message: str) -> ServerError:
    return ServerError(code="SERVER_ERROR", message=message, status_code=400)


def test_create_shows_provisional_row_then_server_record() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)

    async def scenario():
        await controller.load()
        gate = asyncio.Event()
        client.gates = [gate]
        task = asyncio.create_task(controller.create({"customerName": "Kabir", "status": "pending"}))
        await asyncio.sleep(0)
        provisional = [row["id"] for row in controller.records]
        busy = controller.is_busy("create")
        status = controller.status
        gate.set()
        return provisional, busy, status, await task

    provisional, busy, status, created = asyncio.run(scenario())

    assert provisional[-1].startswith("tmp-")
    assert busy is True
    assert status is ControllerStatus.MUTATING
    assert created["id"] == "b-101"
    assert [row["id"] for row in controller.records] == ["b-1", "b-2", "b-3", "b-101"]
    assert controller.status is ControllerStatus.READY
    assert not controller.busy
    assert notifications.messages[-1]["level"] == "success"


def test_create_failure_restores_collection_and_notifies() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)
    asyncio.run(controller.load())
    before = controller.records
    client.failures = [_server_error("Travel date is in the past")]

    assert asyncio.run(controller.create({"customerName": "Kabir"})) is None

    assert controller.records == before
    assert [item["message"] for item in notifications.errors()] == ["Travel date is in the past"]


def test_invalid_form_blocks_the_api_call() -> None:
    client = FakeCollectionClient([])
    controller, notifications = _controller(client)
    asyncio.run(controller.load())

    result = asyncio.run(controller.create({"name": "R", "email": "bad"}, validator=validate_manager_form))

    assert result is None
    assert {"email", "username", "phone", "password"} <= set(controller.field_errors)
    assert [call for call in client.calls if call[0] == "create"] == []
    assert notifications.messages == []


def test_second_create_while_in_flight_is_ignored() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, _ = _controller(client)

    async def scenario():
        await controller.load()
        gate = asyncio.Event()
        client.gates = [gate]
        first = asyncio.create_task(controller.create({"customerName": "Kabir"}))
        await asyncio.sleep(0)
        second = await controller.create({"customerName": "Kabir"})
        gate.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first is not None
    assert second is None
    assert len([call for call in client.calls if call[0] == "create"]) == 1
    assert len(controller.records) == 4


def test_update_field_reconciles_with_server_record() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, _ = _controller(client)
    asyncio.run(controller.load())

    updated = asyncio.run(controller.update_field("b-1", "status", "confirmed"))

    assert updated == {"id": "b-1", "customerName": "Ravi", "status": "confirmed"}
    assert controller.records[0] == updated
    assert client.calls[-1] == ("update", "b-1", {"status": "confirmed"})


def test_update_failure_restores_snapshot_in_place() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)
    asyncio.run(controller.load())
    client.failures = [NetworkError(code="NETWORK_ERROR", message="Could not reach the server.")]

    assert asyncio.run(controller.update_field("b-2", "status", "cancelled")) is None

    assert controller.records[1] == BOOKINGS[1]
    assert notifications.errors()[0]["title"] == "Connection problem"


def test_delete_failure_reinserts_at_original_index() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)
    asyncio.run(controller.load())
    client.failures = [_server_error("Booking has payments")]

    assert asyncio.run(controller.delete("b-2")) is False

    assert [row["id"] for row in controller.records] == ["b-1", "b-2", "b-3"]
    assert notifications.errors()[0]["message"] == "Booking has payments"


def test_delete_success_removes_record() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, _ = _controller(client)
    asyncio.run(controller.load())

    assert asyncio.run(controller.delete("b-3")) is True

    assert [row["id"] for row in controller.records] == ["b-1", "b-2"]
    assert controller.view.total_count == 2


def test_unknown_record_reports_not_found_without_calling_the_api() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)
    asyncio.run(controller.load())

    assert asyncio.run(controller.update_field("b-404", "status", "confirmed")) is None
    assert asyncio.run(controller.delete("b-404")) is False

    assert client.calls == [("list",)]
    assert [error["title"] for error in notifications.errors()] == ["Not found", "Not found"]
    assert notifications.errors()[0]["details"]["code"] == "NOT_FOUND"
    assert controller.status is ControllerStatus.READY


def test_stale_response_does_not_overwrite_newer_state(caplog) -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, _ = _controller(client)
    caplog.set_level(logging.INFO, logger="travelops_console.controller")

    async def scenario():
        await controller.load()
        slow = asyncio.Event()
        client.gates = [slow, None]
        first = asyncio.create_task(controller.update_field("b-1", "customerName", "Ravi K"))
        await asyncio.sleep(0)
        second = await controller.update_field("b-1", "status", "confirmed")
        slow.set()
        return await first, second

    first, second = asyncio.run(scenario())

    assert first is None
    assert second["status"] == "confirmed"
    assert controller.records[0] == second
    assert any("stale_response_dropped" in record.getMessage() for record in caplog.records)


def test_late_failure_of_superseded_update_keeps_newer_state() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)

    async def scenario():
        await controller.load()
        slow = asyncio.Event()
        client.gates = [slow, None]
        client.failures = [_server_error("Locked"), None]
        first = asyncio.create_task(controller.update_field("b-1", "customerName", "Ravi K"))
        await asyncio.sleep(0)
        await controller.update_field("b-1", "status", "confirmed")
        slow.set()
        await first

    asyncio.run(scenario())

    assert controller.records[0]["status"] == "confirmed"
    assert controller.records[0]["customerName"] == "Ravi"
    assert len(notifications.errors()) == 1


def test_dispose_ignores_late_mutation_responses() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)
    views = []

    async def scenario():
        await controller.load()
        controller.subscribe(views.append)
        gate = asyncio.Event()
        client.gates = [gate]
        client.failures = [_server_error("late")]
        task = asyncio.create_task(controller.delete("b-1"))
        await asyncio.sleep(0)
        controller.dispose()
        published = len(views)
        gate.set()
        return published, await task

    published, result = asyncio.run(scenario())

    assert result is False
    assert len(views) == published
    assert notifications.messages == []
    assert [row["id"] for row in controller.records] == ["b-2", "b-3"]


def test_overlapping_updates_that_both_fail_restore_the_server_record() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, notifications = _controller(client)

    async def scenario():
        await controller.load()
        rename_gate, status_gate = asyncio.Event(), asyncio.Event()
        client.gates = [rename_gate, status_gate]
        client.failures = [_server_error("Locked"), _server_error("Locked")]
        rename = asyncio.create_task(controller.update_field("b-1", "customerName", "Ravi K"))
        await asyncio.sleep(0)
        status = asyncio.create_task(controller.update_field("b-1", "status", "confirmed"))
        await asyncio.sleep(0)
        status_gate.set()
        await status
        after_status = dict(controller.records[0])
        rename_gate.set()
        await rename
        return after_status

    after_status = asyncio.run(scenario())

    assert after_status == {"id": "b-1", "customerName": "Ravi K", "status": "pending"}
    assert controller.records[0] == BOOKINGS[0]
    assert len(notifications.errors()) == 2
    assert controller.tracker.pending == {}


def test_failed_delete_reinserts_record_with_update_still_in_flight() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, _ = _controller(client)

    async def scenario():
        await controller.load()
        update_gate, delete_gate = asyncio.Event(), asyncio.Event()
        client.gates = [update_gate, delete_gate]
        client.failures = [_server_error("Locked"), _server_error("Booking has payments")]
        update = asyncio.create_task(controller.update_field("b-2", "status", "cancelled"))
        await asyncio.sleep(0)
        delete = asyncio.create_task(controller.delete("b-2"))
        await asyncio.sleep(0)
        delete_gate.set()
        await delete
        after_delete = [dict(row) for row in controller.records]
        update_gate.set()
        await update
        return after_delete

    after_delete = asyncio.run(scenario())

    assert [row["id"] for row in after_delete] == ["b-1", "b-2", "b-3"]
    assert after_delete[1]["status"] == "cancelled"
    assert list(controller.records) == BOOKINGS


def test_create_form_state_disables_submit_while_create_is_in_flight() -> None:
    client = FakeCollectionClient(BOOKINGS)
    controller, _ = _controller(client)
    valid = {
        "name": "Asha",
        "email": "asha@agency.in",
        "username": "asha",
        "phone": "98765 43210",
        "password": "longenough",
    }

    async def scenario():
        await controller.load()
        before = controller.create_form_state(valid, validate_manager_form)
        gate = asyncio.Event()
        client.gates = [gate]
        task = asyncio.create_task(controller.create(valid, validate_manager_form))
        await asyncio.sleep(0)
        during = controller.create_form_state(valid, validate_manager_form)
        gate.set()
        await task
        return before, during

    before, during = asyncio.run(scenario())

    assert before.submit_enabled is True
    assert during.status.value == "submitting"
    assert during.submit_enabled is False
