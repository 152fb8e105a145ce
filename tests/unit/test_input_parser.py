"""Tests for spreadsheet and text input parsing."""

import io

import pandas as pd

from organic_verifier.services.parsing.input_parser import (
    parse_csv,
    parse_spreadsheet,
    parse_text_input,
)


# ==========================================
#  TEXT INPUT
# ==========================================


def test_parse_text_id_only():
    result = parse_text_input("8150000001\n")
    assert result.errors == []
    assert len(result.operations) == 1
    op = result.operations[0]
    assert op.id == "8150000001"
    assert op.operation_name == "Operation 8150000001"
    assert op.products == []


def test_parse_text_id_and_products():
    result = parse_text_input("8150000001 | Ginger, Turmeric ,  ")
    op = result.operations[0]
    assert op.id == "8150000001"
    assert op.products == ["Ginger", "Turmeric"]


def test_parse_text_name_id_products():
    text = "Spice Co | 8150000001 | Ginger, Black Pepper\n\n   \nHerb Farm | 8150000002 |"
    result = parse_text_input(text)
    assert result.errors == []
    assert [op.operation_name for op in result.operations] == ["Spice Co", "Herb Farm"]
    assert result.operations[0].products == ["Ginger", "Black Pepper"]
    assert result.operations[1].products == []


def test_parse_text_missing_id_reports_line():
    result = parse_text_input("Spice Co |  | Ginger\n8150000002")
    assert len(result.operations) == 1
    assert result.errors[0].startswith("Line 1: Missing required field (ID)")


# ==========================================
#  CSV
# ==========================================


def test_parse_csv_header_aliases():
    content = "Supplier Name,OID,Ingredients\nSpice Co,8150000001,\"Ginger, Turmeric\"\n,8150000002,\n"
    result = parse_csv(content)
    assert result.errors == []
    assert [op.id for op in result.operations] == ["8150000001", "8150000002"]
    assert result.operations[0].operation_name == "Spice Co"
    assert result.operations[0].products == ["Ginger", "Turmeric"]
    assert result.operations[1].operation_name == "Operation 8150000002"


def test_parse_csv_keeps_leading_zeros():
    result = parse_csv("nop_id\n0012345\n")
    assert result.operations[0].id == "0012345"


def test_parse_csv_row_without_id():
    result = parse_csv("operation_name,nop_id,products\nSpice Co,,Ginger\nHerb Farm,8150000002,Basil\n")
    assert len(result.operations) == 1
    assert result.errors == ["Row 2: Missing required field (ID)"]


def test_parse_csv_without_id_column():
    result = parse_csv("name,products\nSpice Co,Ginger\n")
    assert result.operations == []
    assert "No ID column" in result.errors[0]


def test_parse_csv_empty():
    result = parse_csv("")
    assert result.operations == []
    assert result.errors == ["CSV file is empty"]


# ==========================================
#  SPREADSHEET
# ==========================================


def test_parse_spreadsheet_xlsx():
    df = pd.DataFrame(
        {
            "Operation Name": ["Spice Co", "Herb Farm"],
            "NOP ID": ["8150000001", "8150000002"],
            "Products": ["Ginger, Turmeric", ""],
        }
    )
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False)

    result = parse_spreadsheet(buffer.getvalue())
    assert result.errors == []
    assert [op.operation_name for op in result.operations] == ["Spice Co", "Herb Farm"]
    assert result.operations[0].products == ["Ginger", "Turmeric"]
    assert result.operations[1].products == []


def test_parse_spreadsheet_invalid_bytes():
    result = parse_spreadsheet(b"definitely not a workbook")
    assert result.operations == []
    assert result.errors[0].startswith("Spreadsheet parsing error")
