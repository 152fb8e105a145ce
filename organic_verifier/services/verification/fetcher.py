"""Record fetcher: registry document in, certification record out."""

import logging
import time

from organic_verifier.infrastructure.registry.document_source import DocumentSource
from organic_verifier.services.verification.errors import RecordNotFound
from organic_verifier.services.verification.extraction import (
    document_lines,
    earliest_effective_date,
    extract_certifier,
    extract_operation_name,
    extract_scopes,
    merge_certified_products,
)
from organic_verifier.services.verification.models import CertificationRecord

logger = logging.getLogger(__name__)


class RecordFetcher:
    """Fetches and extracts one operation's certification record."""

    def __init__(self, source: DocumentSource):
        """Initialize fetcher with the document source to read from."""
        self.source = source

    async def fetch_record(self, registry_id: str) -> CertificationRecord:
        """
        Fetch the registry page for an ID and extract its record.

        Args:
            registry_id: Registry identifier of the operation

        Returns:
            CertificationRecord with all four scopes

        Raises:
            RegistryUnavailable: The page could not be retrieved or rendered
            RecordNotFound: The page has neither operation name nor certifier
        """
        start = time.time()
        soup = await self.source.fetch_document(registry_id)

        # Scope cells are read before the page is flattened to lines
        scopes = extract_scopes(soup)
        lines = document_lines(soup)
        operation_name = extract_operation_name(lines)
        certifier = extract_certifier(lines)

        if operation_name is None and certifier is None:
            raise RecordNotFound(
                registry_id,
                f"No certification data found for ID {registry_id}. "
                "The page may be empty or the ID may be invalid.",
            )

        record = CertificationRecord(
            operation_name=operation_name,
            certifier=certifier,
            scopes=scopes,
            effective_date=earliest_effective_date(scopes),
            all_certified_products=merge_certified_products(scopes),
        )
        logger.info(
            "Fetched record for ID %s in %.0f ms (%d certified products)",
            registry_id,
            (time.time() - start) * 1000,
            len(record.all_certified_products),
        )
        return record
