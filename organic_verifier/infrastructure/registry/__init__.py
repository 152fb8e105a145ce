"""Registry access module."""

from organic_verifier.infrastructure.registry.document_source import (
    BrowserDocumentSource,
    DocumentSource,
    HttpDocumentSource,
    build_document_source,
    build_registry_url,
)

__all__ = [
    "BrowserDocumentSource",
    "DocumentSource",
    "HttpDocumentSource",
    "build_document_source",
    "build_registry_url",
]
