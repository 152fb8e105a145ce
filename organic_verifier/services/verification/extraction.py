"""Extract certification fields from a rendered registry page.

Expected page shape: an ``Operation Name`` label followed by its value, a
``Certifier:`` label followed by a value optionally wrapped as
``[CODE] Name``, and a table whose rows start with one of the scope labels
followed by status, effective date and certified-product cells.
"""

import re

from bs4 import BeautifulSoup, Tag

from organic_verifier.config.constants import (
    CERTIFIER_LABEL,
    MIN_PRODUCT_LENGTH,
    OPERATION_NAME_LABEL,
    PLACEHOLDER_VALUES,
    SCOPE_LABELS,
)
from organic_verifier.services.verification.models import Scope
from organic_verifier.utils.text_processing import normalize_text, parse_date

_NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]
_BLOCK_TAGS = ["li", "p", "div"]

_CERTIFIER_CODE = re.compile(r"^\[[^\]]+\]\s*(.+)$")
_GROUP_DELIMITER = re.compile(r"[;\n]")


def document_lines(soup: BeautifulSoup) -> list[str]:
    """Visible text of the document, one stripped non-empty line per entry."""
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    lines = (" ".join(line.split()) for line in soup.get_text("\n").splitlines())
    return [line for line in lines if line]


def _text_after_label(lines: list[str], label: str) -> str | None:
    pattern = re.compile(rf"^{re.escape(label.rstrip(':'))}\s*(?::\s*(.*))?$", re.IGNORECASE)
    for i, line in enumerate(lines):
        match = pattern.match(line)
        if not match:
            continue
        value = (match.group(1) or "").strip()
        if value:
            return value
        if i + 1 < len(lines) and not lines[i + 1].endswith(":"):
            return lines[i + 1]
        return None
    return None


def extract_operation_name(lines: list[str]) -> str | None:
    return _text_after_label(lines, OPERATION_NAME_LABEL)


def extract_certifier(lines: list[str]) -> str | None:
    certifier = _text_after_label(lines, CERTIFIER_LABEL)
    if certifier is None:
        return None
    match = _CERTIFIER_CODE.match(certifier)
    return match.group(1).strip() if match else certifier


def _clean_cell(text: str) -> str | None:
    value = " ".join(text.split())
    if value.lower() in PLACEHOLDER_VALUES:
        return None
    return value


def _cell_text(cell: Tag) -> str:
    # Line breaks and block children delimit category groups
    for br in cell.find_all("br"):
        br.replace_with("\n")
    for block in cell.find_all(_BLOCK_TAGS):
        block.append("\n")
    return cell.get_text()


def split_outside_parentheses(text: str) -> list[str]:
    """Split on commas that are not enclosed in parentheses."""
    items: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "(":
            depth += 1
        elif char == ")" and depth > 0:
            depth -= 1
        elif char == "," and depth == 0:
            items.append("".join(current))
            current = []
            continue
        current.append(char)
    items.append("".join(current))
    return items


def parse_product_cell(raw: str) -> list[str]:
    """
    Parse a scope's raw certified-products cell into display items.

    The cell holds ``;``- or newline-separated groups, each optionally
    prefixed by a ``Category:`` label. Items are deduplicated on their
    normalized form; the first original spelling is kept.

    Args:
        raw: Cell text

    Returns:
        Ordered, deduplicated product names
    """
    products: list[str] = []
    seen: set[str] = set()
    for group in _GROUP_DELIMITER.split(raw):
        if ":" in group:
            group = group.split(":", 1)[1]
        for item in split_outside_parentheses(group):
            item = " ".join(item.split())
            if len(item) < MIN_PRODUCT_LENGTH:
                continue
            key = normalize_text(item)
            if not key or key in seen:
                continue
            seen.add(key)
            products.append(item)
    return products


def extract_scopes(soup: BeautifulSoup) -> list[Scope]:
    """Read the four scope rows; categories missing from the page stay empty."""
    found: dict[str, Scope] = {}
    for row in soup.find_all("tr"):
        cells = row.find_all(["td", "th"])
        for i, cell in enumerate(cells):
            label = " ".join(cell.get_text(" ", strip=True).split()).upper()
            if label not in SCOPE_LABELS or label in found:
                continue
            following = cells[i + 1:i + 4]
            status = _clean_cell(following[0].get_text(" ")) if len(following) > 0 else None
            effective_date = _clean_cell(following[1].get_text(" ")) if len(following) > 1 else None
            products = parse_product_cell(_cell_text(following[2])) if len(following) > 2 else []
            found[label] = Scope(
                scope_name=label,
                status=status,
                effective_date=effective_date,
                certified_products=products,
            )
            break

    return [found.get(label, Scope(scope_name=label)) for label in SCOPE_LABELS]


def earliest_effective_date(scopes: list[Scope]) -> str | None:
    """Original text of the chronologically earliest parseable scope date."""
    earliest: str | None = None
    earliest_parsed = None
    for scope in scopes:
        if not scope.effective_date:
            continue
        parsed = parse_date(scope.effective_date)
        if parsed is None:
            continue
        if earliest_parsed is None or parsed < earliest_parsed:
            earliest, earliest_parsed = scope.effective_date, parsed
    return earliest


def merge_certified_products(scopes: list[Scope]) -> list[str]:
    """Insertion-ordered union of every scope's products (exact strings)."""
    merged: dict[str, None] = {}
    for scope in scopes:
        for product in scope.certified_products:
            merged.setdefault(product, None)
    return list(merged)
