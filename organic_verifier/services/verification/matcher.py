"""Reconcile a caller's product list against certified products."""

from collections.abc import Sequence

from organic_verifier.utils.text_processing import normalize_text


def match_products(
    user_products: Sequence[str],
    certified_products: Sequence[str],
) -> tuple[list[str], list[str]]:
    """
    Partition user products into matching and missing.

    A user product matches when its normalized form is contained in, or
    contains, the normalized form of any certified product. Both lists keep
    the caller's original text and order.

    Args:
        user_products: Products as supplied by the caller
        certified_products: Products listed on the registry record

    Returns:
        Tuple of (matching, missing)
    """
    normalized_certified = [normalize_text(c) for c in certified_products]

    matching: list[str] = []
    missing: list[str] = []
    for product in user_products:
        normalized = normalize_text(product)
        if any(normalized in c or c in normalized for c in normalized_certified):
            matching.append(product)
        else:
            missing.append(product)
    return matching, missing
