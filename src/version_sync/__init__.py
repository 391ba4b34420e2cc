"""Fetch the latest published version and merge it into a package manifest."""

from .client import AsyncHttpClient, HttpClient, Response, afetch_body, arequest, fetch_body, request
from .exceptions import ManifestError, VersionSyncError, VersionSyncTimeoutError, VersionSyncValidationError
from .manifest import sync_version, update_manifest
from .models import VersionDescriptor
from .request_options import RequestOptions
from .retry import MAX_ATTEMPTS, arequest_with_retry, request_with_retry

__all__ = [
    "AsyncHttpClient",
    "HttpClient",
    "MAX_ATTEMPTS",
    "ManifestError",
    "RequestOptions",
    "Response",
    "VersionDescriptor",
    "VersionSyncError",
    "VersionSyncTimeoutError",
    "VersionSyncValidationError",
    "afetch_body",
    "arequest",
    "arequest_with_retry",
    "fetch_body",
    "request",
    "request_with_retry",
    "sync_version",
    "update_manifest",
]
