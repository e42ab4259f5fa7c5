"""Tests for DOM-to-record extraction against static HTML fixtures."""

import dataclasses

import pytest

from src.search_scraper.amazon.extractor import (
    SelectorContract,
    extract_products,
    find_next_page,
)
from src.search_scraper.base import ConfigurationError
from tests.helpers import items, result_item, results_page


class TestExtractProducts:
    """Test record extraction from a results page."""

    @pytest.mark.unit
    def test_full_item(self, us_region, sequential_ids):
        """Test every field is read from a complete result item."""
        html = results_page(
            [
                result_item(
                    title="  Apple iPhone 13  ",
                    description="Renewed, unlocked",
                    price="$1,234.56",
                    rating="4.3 out of 5 stars",
                    reviews="(12,345)",
                )
            ]
        )

        page = extract_products(html, us_region, 10, id_factory=sequential_ids)

        assert len(page.records) == 1
        record = page.records[0]
        assert record.id == "id-1"
        assert record.title == "Apple iPhone 13"
        assert record.description == "Renewed, unlocked"
        assert record.price == 1234.56
        assert record.rating == 4.3
        assert record.review_count == 12345
        assert record.is_prime_eligible is True
        assert record.image_url == "https://m.media-amazon.com/images/I/61VuVU94RnL.jpg"
        assert (
            record.link_url
            == "https://www.amazon.com/Apple-iPhone-13-128GB-Midnight/dp/B09G9HD6PD"
        )
        assert record.currency_code == "USD"

    @pytest.mark.unit
    def test_partial_item_defaults(self, us_region):
        """Test missing optional fields fall back instead of failing."""
        html = results_page(
            [
                result_item(
                    price="Currently unavailable",
                    rating=None,
                    reviews=None,
                    image=None,
                    prime=False,
                )
            ]
        )

        record = extract_products(html, us_region, 10).records[0]

        assert record.description == record.title
        assert record.price == 0.0
        assert record.rating is None
        assert record.review_count is None
        assert record.image_url == ""
        assert record.is_prime_eligible is False

    @pytest.mark.unit
    def test_items_without_title_or_link_are_skipped(self, us_region):
        """Test incomplete items are dropped and do not consume quota."""
        html = results_page(
            [
                result_item(title=None),
                result_item(href=None),
                result_item(title="   "),
                result_item(title="Kept", href="/kept/dp/B0KEPT0001"),
            ]
        )

        page = extract_products(html, us_region, 1)

        assert [record.title for record in page.records] == ["Kept"]
        assert page.skipped == 3
        assert page.containers_seen == 4

    @pytest.mark.unit
    def test_stops_at_remaining_quota(self, us_region):
        """Test items beyond the remaining quota are not processed."""
        calls = []

        def counting_ids():
            calls.append(1)
            return f"id-{len(calls)}"

        html = results_page(items(8))
        page = extract_products(html, us_region, 3, id_factory=counting_ids)

        assert [record.title for record in page.records] == [
            "Product 1",
            "Product 2",
            "Product 3",
        ]
        assert len(calls) == 3

    @pytest.mark.unit
    def test_non_http_links_are_skipped(self, us_region):
        """Test script and mail links never become product URLs."""
        html = results_page(
            [
                result_item(href="javascript:void(0)"),
                result_item(href="mailto:deals@example.com"),
                result_item(title="Kept", href="/kept/dp/B0KEPT0001"),
            ]
        )

        page = extract_products(html, us_region, 10)

        assert [r.link_url for r in page.records] == [
            "https://www.amazon.com/kept/dp/B0KEPT0001"
        ]
        assert page.skipped == 2

    @pytest.mark.unit
    def test_zero_remaining_returns_nothing(self, us_region):
        page = extract_products(results_page(items(3)), us_region, 0)
        assert page.records == []

    @pytest.mark.unit
    def test_affiliate_suffix_applied_to_every_link(self, tagged_us_region):
        html = results_page(
            items(3)
            + [result_item(href="https://www.amazon.com/gp/slredirect/abc")]
        )

        records = extract_products(html, tagged_us_region, 10).records

        assert len(records) == 4
        assert all(r.link_url.endswith("?tag=myamazon-20") for r in records)
        assert records[-1].link_url == (
            "https://www.amazon.com/gp/slredirect/abc?tag=myamazon-20"
        )

    @pytest.mark.unit
    def test_no_suffix_without_tag(self, us_region):
        records = extract_products(results_page(items(2)), us_region, 10).records
        assert all("tag=" not in r.link_url for r in records)

    @pytest.mark.unit
    def test_items_outside_result_slot_are_ignored(self, us_region):
        html = (
            "<html><body>"
            + result_item(title="Outside the slot")
            + results_page([result_item(title="Inside")])
            + "</body></html>"
        )
        titles = [r.title for r in extract_products(html, us_region, 10).records]
        assert titles == ["Inside"]

    @pytest.mark.unit
    def test_ids_are_unique(self, us_region):
        records = extract_products(results_page(items(20)), us_region, 20).records
        assert len({record.id for record in records}) == 20

    @pytest.mark.unit
    def test_empty_page(self, us_region):
        page = extract_products(results_page([]), us_region, 10)
        assert page.records == []
        assert page.containers_seen == 0

    @pytest.mark.unit
    def test_records_are_immutable(self, us_region):
        record = extract_products(results_page(items(1)), us_region, 1).records[0]
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.price = 1.0


class TestFindNextPage:
    """Test next-page detection."""

    @pytest.mark.unit
    def test_enabled_next_link(self):
        html = results_page(items(1), next_href="/s?k=iPhone+13&page=2")
        assert find_next_page(html) == "/s?k=iPhone+13&page=2"

    @pytest.mark.unit
    def test_disabled_next_control(self):
        assert find_next_page(results_page(items(1), next_disabled=True)) is None

    @pytest.mark.unit
    def test_missing_next_control(self):
        assert find_next_page(results_page(items(1))) is None

    @pytest.mark.unit
    def test_next_control_without_href(self):
        html = '<a class="s-pagination-next">Next</a>'
        assert find_next_page(html) is None


class TestSelectorContract:
    """Test the configurable extraction contract."""

    @pytest.mark.unit
    def test_defaults_from_empty_config(self):
        assert SelectorContract.from_config(None) == SelectorContract()

    @pytest.mark.unit
    def test_override_selector(self, us_region):
        """Test a drifted layout is handled by changing one selector."""
        contract = SelectorContract.from_config(
            {"version": 2, "title": "h2 span.title"}
        )
        html = results_page(
            [
                '<div class="s-result-item" data-component-type="s-search-result">'
                '<h2><a href="/dp/B0NEW00001"><span class="title">New layout</span>'
                "</a></h2></div>"
            ]
        )

        records = extract_products(html, us_region, 10, contract=contract).records

        assert contract.version == 2
        assert records[0].title == "New layout"

    @pytest.mark.unit
    def test_unknown_selector_key(self):
        with pytest.raises(ConfigurationError, match="Unknown selector keys"):
            SelectorContract.from_config({"titel": "h2"})
