"""Tests for registry page extraction."""

from bs4 import BeautifulSoup

from organic_verifier.config.constants import SCOPE_LABELS
from organic_verifier.services.verification.extraction import (
    document_lines,
    earliest_effective_date,
    extract_certifier,
    extract_operation_name,
    extract_scopes,
    merge_certified_products,
    parse_product_cell,
    split_outside_parentheses,
)
from organic_verifier.services.verification.models import Scope


# ==========================================
#  PRODUCT CELL PARSING
# ==========================================


def test_parse_product_cell_categories_and_parentheses():
    raw = "Spices: ginger, turmeric (organic); Oils: olive oil"
    assert parse_product_cell(raw) == ["ginger", "turmeric (organic)", "olive oil"]


def test_parse_product_cell_newline_groups():
    raw = "Grains: oats, barley\nPulses: lentils (red, green)"
    assert parse_product_cell(raw) == ["oats", "barley", "lentils (red, green)"]


def test_parse_product_cell_without_category_prefix():
    assert parse_product_cell("apples, pears") == ["apples", "pears"]


def test_parse_product_cell_drops_short_items():
    assert parse_product_cell("Fruit: fig, ok, kiwi, a") == ["fig", "kiwi"]


def test_parse_product_cell_dedups_on_normalized_form():
    raw = "Spices: Ginger, ginger*; Roots: GINGER, turmeric"
    assert parse_product_cell(raw) == ["Ginger", "turmeric"]


def test_parse_product_cell_empty():
    assert parse_product_cell("") == []
    assert parse_product_cell(" ; \n ") == []


def test_split_outside_parentheses():
    assert split_outside_parentheses("a, b (c, d), e") == ["a", " b (c, d)", " e"]


def test_split_outside_parentheses_unbalanced_close():
    assert split_outside_parentheses("a), b") == ["a)", " b"]


# ==========================================
#  LABELS
# ==========================================


def test_extract_operation_name_and_certifier(registry_soup):
    lines = document_lines(registry_soup())
    assert extract_operation_name(lines) == "Acme Organic Farms"
    assert extract_certifier(lines) == "CCOF Certification Services, LLC"


def test_extract_certifier_without_code(registry_soup):
    lines = document_lines(registry_soup(certifier="Oregon Tilth"))
    assert extract_certifier(lines) == "Oregon Tilth"


def test_extract_labels_missing(registry_soup):
    lines = document_lines(registry_soup(operation_name=None, certifier=None))
    assert extract_operation_name(lines) is None
    assert extract_certifier(lines) is None


def test_extract_label_value_on_same_line():
    soup = BeautifulSoup("<p>Operation Name: Sunny Acres</p><p>Certifier: [QAI] QAI Inc</p>", "html.parser")
    lines = document_lines(soup)
    assert extract_operation_name(lines) == "Sunny Acres"
    assert extract_certifier(lines) == "QAI Inc"


def test_document_lines_skip_scripts(registry_soup):
    lines = document_lines(registry_soup())
    assert not any("injected" in line for line in lines)


# ==========================================
#  SCOPES
# ==========================================


def test_extract_scopes_fills_all_four(registry_soup):
    scopes = extract_scopes(registry_soup())
    assert [s.scope_name for s in scopes] == list(SCOPE_LABELS)

    crops, handling, livestock, wild = scopes
    assert crops.status == "Certified"
    assert crops.effective_date == "01/15/2021"
    assert crops.certified_products == ["ginger", "turmeric (organic)", "basil"]
    assert handling.certified_products == ["olive oil", "sesame oil"]
    assert livestock.status is None
    assert livestock.effective_date is None
    assert livestock.certified_products == []
    assert wild == Scope(scope_name="WILD CROPS")


def test_extract_scopes_reads_line_breaks_in_product_cell():
    html = (
        "<table><tr><td>Crops</td><td>Certified</td><td>2020-05-01</td>"
        "<td>Fruits: apples, pears<br/>Nuts: almonds</td></tr></table>"
    )
    crops = extract_scopes(BeautifulSoup(html, "html.parser"))[0]
    assert crops.scope_name == "CROPS"
    assert crops.certified_products == ["apples", "pears", "almonds"]


def test_extract_scopes_short_row():
    html = "<table><tr><td>WILD CROPS</td><td>Certified</td></tr></table>"
    wild = extract_scopes(BeautifulSoup(html, "html.parser"))[3]
    assert wild.status == "Certified"
    assert wild.effective_date is None
    assert wild.certified_products == []


def test_scope_serialization_uses_display_sentinels():
    data = Scope(scope_name="LIVESTOCK").model_dump()
    assert data["status"] == "Not certified"
    assert data["effective_date"] == "Not found"


# ==========================================
#  DERIVED FIELDS
# ==========================================


def test_earliest_effective_date_skips_sentinels_and_bad_dates():
    scopes = [
        Scope(scope_name="CROPS", effective_date="01/15/2021"),
        Scope(scope_name="HANDLING", effective_date="pending review"),
        Scope(scope_name="LIVESTOCK", effective_date="03/02/2019"),
        Scope(scope_name="WILD CROPS"),
    ]
    assert earliest_effective_date(scopes) == "03/02/2019"


def test_earliest_effective_date_tie_keeps_first():
    scopes = [
        Scope(scope_name="CROPS", effective_date="2019-03-02"),
        Scope(scope_name="HANDLING", effective_date="03/02/2019"),
    ]
    assert earliest_effective_date(scopes) == "2019-03-02"


def test_earliest_effective_date_none_valid():
    assert earliest_effective_date([Scope(scope_name="CROPS")]) is None


def test_merge_certified_products_exact_string_union():
    scopes = [
        Scope(scope_name="CROPS", certified_products=["ginger", "Basil"]),
        Scope(scope_name="HANDLING", certified_products=["basil", "ginger", "olive oil"]),
    ]
    assert merge_certified_products(scopes) == ["ginger", "Basil", "basil", "olive oil"]
