"""Verify a single operation against the registry."""

import logging

from organic_verifier.config.constants import ERROR_CERTIFIER, NOT_FOUND, CertificationStatus
from organic_verifier.config.settings import Settings
from organic_verifier.infrastructure.registry.document_source import build_registry_url
from organic_verifier.services.verification.errors import FetchError
from organic_verifier.services.verification.fetcher import RecordFetcher
from organic_verifier.services.verification.matcher import match_products
from organic_verifier.services.verification.models import OperationInput, VerificationResult

logger = logging.getLogger(__name__)


def _failed_result(operation: OperationInput, source_url: str) -> VerificationResult:
    return VerificationResult(
        operation_name=operation.operation_name,
        id=operation.id,
        certifier=ERROR_CERTIFIER,
        certification_status=CertificationStatus.FAILED,
        effective_date=None,
        all_certified_products=[],
        matching_products=[],
        missing_products=list(operation.products),
        source_url=source_url,
    )


async def verify_operation(
    operation: OperationInput,
    fetcher: RecordFetcher,
    settings: Settings,
) -> VerificationResult:
    """
    Fetch an operation's record and reconcile its products.

    Failures never propagate: any error while fetching or extracting the
    record produces a ``Failed`` result with every caller product reported
    missing.

    Args:
        operation: Operation to verify
        fetcher: Record fetcher bound to a document source
        settings: Application settings (registry URL)

    Returns:
        VerificationResult for the operation
    """
    source_url = build_registry_url(settings, operation.id)
    try:
        record = await fetcher.fetch_record(operation.id)
    except FetchError as e:
        logger.error("Error verifying operation %s: %s", operation.operation_name, e)
        return _failed_result(operation, source_url)
    except Exception as e:
        logger.error(
            "Unexpected error verifying operation %s: %s",
            operation.operation_name,
            e,
            exc_info=True,
        )
        return _failed_result(operation, source_url)

    matching, missing = match_products(operation.products, record.all_certified_products)

    return VerificationResult(
        operation_name=record.operation_name or NOT_FOUND,
        id=operation.id,
        certifier=record.certifier or NOT_FOUND,
        certification_status=record.certification_status,
        effective_date=record.effective_date,
        all_certified_products=record.all_certified_products,
        matching_products=matching,
        missing_products=missing,
        source_url=source_url,
        scopes=record.scopes,
    )
