"""Tests for sales filtering and aggregation."""

from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from pos_recap.data.models import EntityRef, SaleRecord
from pos_recap.reports.aggregate import (
    AggregationRow,
    Dimension,
    ReportKPIs,
    aggregate_by,
    compute_kpis,
    filter_and_aggregate,
    filter_sales,
    matches_search,
    resolve_dimensions,
    top_entity,
)
from pos_recap.reports.window import DateWindow, resolve_window
from tests.test_utils import make_sale

NOW = datetime(2024, 3, 15)


@pytest.fixture
def march_sales() -> list[SaleRecord]:
    return [
        make_sale("1", date(2024, 3, 5), 100000, channel="A", product="Kopi", admin="Andi"),
        make_sale("2", date(2024, 3, 20), 50000, channel="B", product="Teh", admin="Rina"),
        make_sale("3", date(2024, 4, 1), 75000, channel="A", product="Kopi", admin="Andi"),
    ]


def test_monthly_example(march_sales: list[SaleRecord]) -> None:
    """Two March sales out of three, rolled up by channel."""
    result = filter_and_aggregate(march_sales, resolve_window("monthly", NOW))

    assert [s.id for s in result.filtered] == ["2", "1"]
    assert result.kpis == ReportKPIs(total_orders=2, total_revenue=150000, average_order_value=75000)
    assert result.rollup("channel") == [
        AggregationRow("A", 1, 100000.0),
        AggregationRow("B", 1, 50000.0),
    ]


def test_custom_open_start_example(march_sales: list[SaleRecord]) -> None:
    window = resolve_window("custom", NOW, "", "2024-03-10")
    result = filter_and_aggregate(march_sales, window)
    assert [s.id for s in result.filtered] == ["1"]


def test_empty_sales_example() -> None:
    result = filter_and_aggregate([], resolve_window("monthly", NOW))
    assert result.filtered == ()
    assert result.kpis == ReportKPIs(0, 0.0, 0.0)
    assert result.rollups == {}


def test_all_time_includes_every_record(march_sales: list[SaleRecord]) -> None:
    undated = make_sale("4", None, 10000, channel="C")
    result = filter_and_aggregate(march_sales + [undated], resolve_window("all-time", NOW))
    assert {s.id for s in result.filtered} == {"1", "2", "3", "4"}
    assert result.kpis.total_revenue == 235000


def test_filter_partitions_input(march_sales: list[SaleRecord]) -> None:
    window = resolve_window("custom", NOW, "2024-03-01", "2024-03-31")
    filtered = filter_sales(march_sales, window)
    excluded = [s for s in march_sales if s not in filtered]

    assert len(filtered) + len(excluded) == len(march_sales)
    assert all(window.contains(s.purchase_date) for s in filtered)
    assert not any(window.contains(s.purchase_date) for s in excluded)


def test_filter_sorts_newest_first_and_is_stable() -> None:
    sales = [
        make_sale("a", date(2024, 3, 1), 1),
        make_sale("b", date(2024, 3, 2), 1),
        make_sale("c", date(2024, 3, 1), 1),
        make_sale("d", date(2024, 3, 2), 1),
    ]
    filtered = filter_sales(sales, DateWindow())
    assert [s.id for s in filtered] == ["b", "d", "a", "c"]


def test_filter_does_not_mutate_input(march_sales: list[SaleRecord]) -> None:
    before = list(march_sales)
    filter_and_aggregate(march_sales, resolve_window("yearly", NOW))
    assert march_sales == before


@pytest.mark.parametrize("preset", ["daily", "weekly", "monthly", "yearly", "all-time"])
def test_rollups_partition_filtered_set(march_sales: list[SaleRecord], preset: str) -> None:
    result = filter_and_aggregate(march_sales, resolve_window(preset, NOW))
    for rows in result.rollups.values():
        assert sum(r.orders for r in rows) == result.kpis.total_orders
        assert math.isclose(sum(r.revenue for r in rows), result.kpis.total_revenue)


def test_aggregation_is_idempotent(march_sales: list[SaleRecord]) -> None:
    window = resolve_window("yearly", NOW)
    assert filter_and_aggregate(march_sales, window) == filter_and_aggregate(march_sales, window)


def test_default_dimensions() -> None:
    sales = [make_sale("1", date(2024, 3, 5), 100, channel="A", product="P", admin="X")]
    result = filter_and_aggregate(sales, DateWindow())
    assert list(result.rollups) == ["channel", "product", "admin"]


def test_unresolved_references_group_under_sentinel() -> None:
    sales = [
        make_sale("1", date(2024, 3, 5), 100, channel="A"),
        make_sale("2", date(2024, 3, 6), 200),
        SaleRecord(id="3", channel=EntityRef(id="ch9"), price=300, purchase_date=date(2024, 3, 7)),
    ]
    rows = aggregate_by(sales, Dimension.CHANNEL.key_fn())
    assert rows == [AggregationRow("A", 1, 100.0), AggregationRow("N/A", 2, 500.0)]


def test_failing_key_function_degrades_to_sentinel() -> None:
    def broken(sale: SaleRecord) -> str:
        raise KeyError("missing")

    rows = aggregate_by([make_sale("1", date(2024, 3, 5), 10)], broken)
    assert rows == [AggregationRow("N/A", 1, 10.0)]


def test_key_function_index_error_degrades_to_sentinel(caplog: pytest.LogCaptureFixture) -> None:
    def first_tag(sale: SaleRecord) -> str:
        return sale.note.split()[0]

    sales = [
        make_sale("1", date(2024, 3, 5), 10, note="promo lebaran"),
        make_sale("2", date(2024, 3, 6), 20),
    ]
    result = filter_and_aggregate(sales, DateWindow(), dimensions={"tag": first_tag})

    assert result.rollup("tag") == [AggregationRow("promo", 1, 10.0), AggregationRow("N/A", 1, 20.0)]
    assert result.kpis.total_orders == 2
    assert "Key function failed for sale 2" in caplog.text


def test_custom_key_functions_by_mapping() -> None:
    sales = [
        make_sale("1", date(2024, 3, 5), 10, note="promo"),
        make_sale("2", date(2024, 3, 6), 20),
    ]
    result = filter_and_aggregate(sales, DateWindow(), dimensions={"note": lambda s: s.note})
    assert result.rollup("note") == [AggregationRow("promo", 1, 10.0), AggregationRow("N/A", 1, 20.0)]


def test_unknown_dimension_raises() -> None:
    with pytest.raises(ValueError, match="Invalid dimension"):
        resolve_dimensions(["warehouse"])


def test_kpis_coerce_bad_prices() -> None:
    sales = [
        SaleRecord(id="1", price=float("nan")),
        SaleRecord(id="2", price="abc"),  # type: ignore[arg-type]
        SaleRecord(id="3", price=250.0),
    ]
    kpis = compute_kpis(sales)
    assert kpis.total_orders == 3
    assert kpis.total_revenue == 250.0
    assert kpis.average_order_value == pytest.approx(250.0 / 3)


def test_kpis_empty() -> None:
    assert compute_kpis([]) == ReportKPIs()


def test_top_entity_strict_maximum_first_wins() -> None:
    rows = [AggregationRow("A", 1, 100.0), AggregationRow("B", 2, 300.0), AggregationRow("C", 1, 300.0)]
    assert top_entity(rows).name == "B"
    assert top_entity([]) is None


def test_search_matches_reference_names_case_insensitively() -> None:
    sale = make_sale("1", date(2024, 3, 5), 150000, channel="Shopee", customer="Budi", note="Kirim pagi")
    assert matches_search(sale, "shopee")
    assert matches_search(sale, "BUDI")
    assert matches_search(sale, "pagi")
    assert matches_search(sale, "2024-03")
    assert matches_search(sale, "150000")
    assert not matches_search(sale, "tokopedia")


def test_search_blank_text_matches_everything() -> None:
    sale = make_sale("1", date(2024, 3, 5), 1)
    assert matches_search(sale, None)
    assert matches_search(sale, "")
    assert matches_search(sale, "   ")


def test_search_narrows_report(march_sales: list[SaleRecord]) -> None:
    result = filter_and_aggregate(march_sales, DateWindow(), search_text="teh")
    assert [s.id for s in result.filtered] == ["2"]
    assert result.top("product").name == "Teh"
