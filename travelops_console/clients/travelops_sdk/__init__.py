from travelops_console.clients.travelops_sdk.collection_client import CollectionClient
from travelops_console.clients.travelops_sdk.errors import (
    ApiError,
    MalformedResponseError,
    NetworkError,
    ServerError,
    ValidationError,
)
from travelops_console.clients.travelops_sdk.http_client import HttpClient
from travelops_console.clients.travelops_sdk.normalizers import normalize_collection, normalize_record

__all__ = [
    "ApiError",
    "CollectionClient",
    "HttpClient",
    "MalformedResponseError",
    "NetworkError",
    "ServerError",
    "ValidationError",
    "normalize_collection",
    "normalize_record",
]
