"""Parse uploaded spreadsheets and pasted text into operations to verify."""

import io
import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd
from pydantic import ValidationError

from organic_verifier.services.verification.models import OperationInput

logger = logging.getLogger(__name__)

COLUMN_ALIASES: dict[str, list[str]] = {
    "operation_name": ["operation_name", "operation", "supplier_name", "supplier"],
    "id": ["nop_id", "nopid", "oid_number", "oid", "oid_num", "registry_id", "id"],
    "products": ["products", "product", "ingredients", "ingredient"],
}

TEXT_FORMAT_HINT = "Expected: ID | Products (optional) OR Operation Name | ID | Products (optional)"


@dataclass
class ParseResult:
    """Operations parsed from one input plus per-row problems."""

    operations: list[OperationInput] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _normalize_header(header: Any) -> str:
    return "_".join(str(header).strip().lower().split())


def _match_column(columns: list[str], candidates: list[str]) -> str | None:
    for alias in candidates:
        if alias in columns:
            return alias
    return None


def _split_products(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def _build_operation(
    result: ParseResult, label: str, operation_name: str, registry_id: str, products_raw: str
) -> None:
    if not registry_id:
        result.errors.append(f"{label}: Missing required field (ID)")
        return
    try:
        result.operations.append(
            OperationInput(
                operation_name=operation_name,
                id=registry_id,
                products=_split_products(products_raw),
            )
        )
    except ValidationError as e:
        result.errors.append(f"{label}: Validation failed - {e}")


def _parse_frame(df: pd.DataFrame) -> ParseResult:
    result = ParseResult()
    df = df.rename(columns=_normalize_header)
    columns = df.columns.tolist()
    column_cache = {
        name: _match_column(columns, aliases) for name, aliases in COLUMN_ALIASES.items()
    }
    if column_cache["id"] is None:
        result.errors.append(f"No ID column found (accepted headers: {', '.join(COLUMN_ALIASES['id'])})")
        return result

    for idx, row in enumerate(df.to_dict("records")):
        values: dict[str, str] = {}
        for name, column in column_cache.items():
            value = row.get(column) if column else None
            values[name] = "" if value is None or pd.isna(value) else str(value).strip()

        # Row numbers as shown in a spreadsheet (header is row 1)
        _build_operation(
            result,
            f"Row {idx + 2}",
            values["operation_name"],
            values["id"],
            values["products"],
        )
    return result


def parse_csv(content: str) -> ParseResult:
    """Parse CSV text with a header row."""
    try:
        df = pd.read_csv(
            io.StringIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return ParseResult(errors=["CSV file is empty"])
    except pd.errors.ParserError as e:
        return ParseResult(errors=[f"CSV parsing error: {e}"])
    return _parse_frame(df)


def parse_spreadsheet(data: bytes) -> ParseResult:
    """Parse the first sheet of an XLSX/XLS workbook."""
    try:
        df = pd.read_excel(io.BytesIO(data), sheet_name=0, dtype=str, keep_default_na=False)
    except Exception as e:
        logger.warning("Spreadsheet parsing failed: %s", e)
        return ParseResult(errors=[f"Spreadsheet parsing error: {e}"])
    return _parse_frame(df)


def parse_text_input(text: str) -> ParseResult:
    """
    Parse pasted pipe-delimited lines.

    Accepted line formats:
    - ``ID``
    - ``ID | products``
    - ``Operation Name | ID | products``

    Products are comma separated.
    """
    result = ParseResult()
    lines = [line for line in text.splitlines() if line.strip()]
    for index, line in enumerate(lines):
        parts = [part.strip() for part in line.split("|")]
        operation_name, products_raw = "", ""
        if len(parts) == 1:
            registry_id = parts[0]
        elif len(parts) == 2:
            registry_id, products_raw = parts
        else:
            operation_name, registry_id, products_raw = parts[0], parts[1], parts[2]

        label = f"Line {index + 1}"
        if not registry_id:
            result.errors.append(f"{label}: Missing required field (ID). {TEXT_FORMAT_HINT}")
            continue
        _build_operation(result, label, operation_name, registry_id, products_raw)
    return result
