from __future__ import annotations

from dataclasses import dataclass, field

from travelops_console.app.application.kanban_board import KanbanBoard, KanbanColumn
from travelops_console.app.application.tabular_controller import FormValidator, TabularDataController
from travelops_console.app.config import AppConfig
from travelops_console.app.ui.components.notification_center import NotificationCenter
from travelops_console.app.ui.forms import validate_dmc_form, validate_enquiry_form, validate_manager_form
from travelops_console.app.ui.listing_view import ColumnDef
from travelops_console.app.ui.sorting import Collator, ComparatorRegistry, SortOrder, as_datetime, as_number, collator_for
from travelops_console.clients.travelops_sdk.collection_client import CollectionClient
from travelops_console.clients.travelops_sdk.http_client import HttpClient


@dataclass(frozen=True)
class CollectionPreset:
    name: str
    endpoint: str
    search_fields: tuple[str, ...]
    columns: tuple[ColumnDef, ...]
    text_sort_keys: tuple[str, ...] = ()
    date_sort_keys: tuple[str, ...] = ()
    number_sort_keys: tuple[str, ...] = ()
    default_sort: str | None = None
    default_order: SortOrder = SortOrder.ASC
    page_size: int | None = None
    validator: FormValidator | None = None
    kanban_columns: tuple[KanbanColumn, ...] = field(default_factory=tuple)

    def build_registry(self, collate: Collator | None = None) -> ComparatorRegistry:
        registry = ComparatorRegistry.for_fields(self.text_sort_keys, collate=collate)
        for key in self.date_sort_keys:
            registry.register(key, parse=as_datetime)
        for key in self.number_sort_keys:
            registry.register(key, parse=as_number)
        return registry

    @property
    def headers(self) -> list[str]:
        return [column.key for column in self.columns]


ACCOMMODATION_COLUMNS = (
    KanbanColumn("enquiry", "Enquiry", "Awaiting accommodation request"),
    KanbanColumn("availability_check", "Availability check", "Checking room availability"),
    KanbanColumn("quote_generation", "Quote generation", "Generating accommodation quotes"),
    KanbanColumn("customer_review", "Customer review", "Awaiting customer decision"),
    KanbanColumn("booking_confirmed", "Booking confirmed", "Accommodation booking confirmed"),
    KanbanColumn("payment_processing", "Payment processing", "Processing payment"),
    KanbanColumn("confirmed", "Confirmed", "Accommodation confirmed"),
    KanbanColumn("cancelled", "Cancelled", "Accommodation booking cancelled"),
)

PRESETS: dict[str, CollectionPreset] = {
    preset.name: preset
    for preset in (
        CollectionPreset(
            name="managers",
            endpoint="/api/auth/add-managers",
            search_fields=("name", "email", "username", "id"),
            columns=(
                ColumnDef("id", "ID"),
                ColumnDef("name", "Name"),
                ColumnDef("email", "Email"),
                ColumnDef("username", "Username"),
                ColumnDef("status", "Status"),
            ),
            text_sort_keys=("name", "email", "status"),
            default_sort="name",
            page_size=3,
            validator=validate_manager_form,
        ),
        CollectionPreset(
            name="subscriptions",
            endpoint="/api/subscriptions",
            search_fields=("id", "name", "email", "company", "plan"),
            columns=(
                ColumnDef("id", "Sub ID"),
                ColumnDef("name", "Name"),
                ColumnDef("email", "Email"),
                ColumnDef("company", "Company"),
                ColumnDef("plan", "Plan"),
                ColumnDef("paymentStatus", "Payment"),
                ColumnDef("status", "Status"),
                ColumnDef("createdAt", "Created"),
            ),
            text_sort_keys=("name", "company", "plan", "status"),
            date_sort_keys=("createdAt", "renewalDate"),
            number_sort_keys=("amount",),
            default_sort="createdAt",
            default_order=SortOrder.DESC,
        ),
        CollectionPreset(
            name="accommodation",
            endpoint="/api/accommodation-enquiries",
            search_fields=("name", "email", "phone", "locations"),
            columns=(
                ColumnDef("id", "ID"),
                ColumnDef("name", "Name"),
                ColumnDef("email", "Email"),
                ColumnDef("locations", "Locations"),
                ColumnDef("status", "Status"),
                ColumnDef("enquiryDate", "Enquiry date"),
            ),
            text_sort_keys=("name", "status"),
            date_sort_keys=("enquiryDate",),
            validator=validate_enquiry_form,
            kanban_columns=ACCOMMODATION_COLUMNS,
        ),
        CollectionPreset(
            name="bookings",
            endpoint="/api/bookings",
            search_fields=("id", "customerName", "dmcName", "destination", "status"),
            columns=(
                ColumnDef("id", "Booking"),
                ColumnDef("customerName", "Customer"),
                ColumnDef("dmcName", "DMC"),
                ColumnDef("destination", "Destination"),
                ColumnDef("totalAmount", "Amount"),
                ColumnDef("status", "Status"),
                ColumnDef("travelDate", "Travel date"),
            ),
            text_sort_keys=("customerName", "dmcName", "destination", "status"),
            date_sort_keys=("travelDate", "createdAt"),
            number_sort_keys=("totalAmount",),
            default_sort="travelDate",
        ),
        CollectionPreset(
            name="dmcs",
            endpoint="/api/auth/agency-add-dmc",
            search_fields=("name", "contactPerson", "email", "destinations"),
            columns=(
                ColumnDef("id", "ID"),
                ColumnDef("name", "DMC"),
                ColumnDef("contactPerson", "Contact"),
                ColumnDef("email", "Email"),
                ColumnDef("destinations", "Destinations"),
                ColumnDef("status", "Status"),
            ),
            text_sort_keys=("name", "contactPerson", "status"),
            date_sort_keys=("createdAt",),
            default_sort="name",
            validator=validate_dmc_form,
        ),
    )
}


def get_preset(name: str) -> CollectionPreset:
    try:
        return PRESETS[name]
    except KeyError as exc:
        raise ValueError(f"unknown collection {name!r}; choose one of {', '.join(sorted(PRESETS))}") from exc


def build_http_client(config: AppConfig) -> HttpClient:
    return HttpClient(
        config.base_url,
        timeout_seconds=config.timeout_seconds,
        verify_ssl=config.verify_ssl,
        token=config.api_token,
    )


def build_controller(
    preset: CollectionPreset,
    http_client: HttpClient,
    config: AppConfig,
    notifications: NotificationCenter | None = None,
) -> TabularDataController:
    client = CollectionClient(http_client, preset.endpoint, update_method=config.update_method)
    return TabularDataController(
        client,
        module=preset.name,
        search_fields=preset.search_fields,
        registry=preset.build_registry(collator_for(config.locale)),
        notifications=notifications,
        page_size=preset.page_size or config.page_size,
        sort_key=preset.default_sort,
        sort_order=preset.default_order,
        validator=preset.validator,
    )


def build_kanban(preset: CollectionPreset, controller: TabularDataController) -> KanbanBoard:
    if not preset.kanban_columns:
        raise ValueError(f"{preset.name} has no kanban columns")
    return KanbanBoard(controller, preset.kanban_columns)
