"""Operation input parsing module."""

from organic_verifier.services.parsing.input_parser import (
    ParseResult,
    parse_csv,
    parse_spreadsheet,
    parse_text_input,
)

__all__ = ["ParseResult", "parse_csv", "parse_spreadsheet", "parse_text_input"]
