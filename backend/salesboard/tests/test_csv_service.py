from datetime import date
from decimal import Decimal
from io import BytesIO

import pandas as pd

from salesboard.models.kpi import Kpi
from salesboard.models.store import Store
from salesboard.services import catalog_service, csv_service
from salesboard.services.daily_sales_service import summarize_month


HEADER = "Store,KPI,Monthly Goal,MTD Sales"


def test_parse_valid_rows_and_detects_new_names():
    content = "\n".join([HEADER, "downtown,Sales,1000,500", "Airport,Units,40,12.5", ""])

    result = csv_service.parse_sales_csv(content, [Store(name="Downtown")], [Kpi(name="Sales")])

    assert result.success
    assert result.errors == []
    assert result.new_store_names == ["Airport"]
    assert result.new_kpi_names == ["Units"]
    assert result.sales_rows[0].store_name == "Downtown"
    assert result.sales_rows[1].mtd_sales == 12.5
    assert result.message == "Successfully validated 2 data rows, detected 1 new stores, detected 1 new KPIs"


def test_parse_collects_row_errors():
    content = "\n".join([
        HEADER,
        "Downtown,Sales,1000,500",
        ",Sales,10,5",
        "Downtown,,10,5",
        "Downtown,Sales,lots,5",
        "Downtown,Sales,10,n/a",
    ])

    result = csv_service.parse_sales_csv(content, [Store(name="Downtown")], [Kpi(name="Sales")])

    assert result.success
    assert len(result.sales_rows) == 1
    assert result.errors == [
        "Row 3: Store name is required",
        "Row 4: KPI name is required",
        "Row 5: Monthly Goal must be a number",
        "Row 6: MTD Sales must be a number",
    ]
    assert result.message == "Successfully validated 1 data rows with 4 errors"


def test_parse_requires_header_and_data():
    result = csv_service.parse_sales_csv(HEADER + "\n", [], [])

    assert not result.success
    assert result.message == "CSV file must contain a header row and at least one data row"


def test_parse_reports_missing_headers():
    result = csv_service.parse_sales_csv("Store,KPI,Goal\nDowntown,Sales,10", [], [])

    assert not result.success
    assert result.message == "Missing required headers: Monthly Goal, MTD Sales"


def test_parse_with_no_valid_rows():
    result = csv_service.parse_sales_csv(HEADER + "\nDowntown,Sales,x,y", [], [])

    assert not result.success
    assert result.message == "No valid data found in the CSV file"


def test_import_creates_catalog_and_records_today(db, org, owner):
    content = "\n".join([HEADER, "Downtown,Sales,1000,500", "Airport,Sales,2000,700"])

    result = csv_service.import_sales(db, org.id, owner, content, today=date(2024, 3, 10))

    assert result.imported == 2
    assert [s.name for s in catalog_service.list_stores(db, org.id, owner)] == ["Downtown", "Airport"]
    totals = sorted(s.mtd_sales for s in summarize_month(db, org.id, "2024-03", owner))
    assert totals == [Decimal("500"), Decimal("700")]


def test_reimport_same_day_replaces_value(db, org, owner):
    csv_service.import_sales(db, org.id, owner, HEADER + "\nDowntown,Sales,1000,500", today=date(2024, 3, 10))
    csv_service.import_sales(db, org.id, owner, HEADER + "\nDowntown,Sales,1000,800", today=date(2024, 3, 10))

    summaries = summarize_month(db, org.id, "2024-03", owner)
    assert len(summaries) == 1
    assert summaries[0].mtd_sales == Decimal("800")


def test_dry_run_writes_nothing(db, org, owner):
    result = csv_service.import_sales(db, org.id, owner, HEADER + "\nDowntown,Sales,1000,500", dry_run=True)

    assert result.success
    assert result.imported == 0
    assert catalog_service.list_stores(db, org.id, owner) == []


def test_template_uses_existing_names(db, org, store, kpi, owner):
    template = csv_service.generate_csv_template([store], [kpi])

    assert template.splitlines() == [HEADER, "Downtown,Sales,1000,500"]
    assert csv_service.generate_csv_template([], []).splitlines()[1] == "Store A,Sales,10000,5000"


def test_export_csv(db, org, store, kpi, owner):
    csv_service.import_sales(db, org.id, owner, HEADER + "\nDowntown,Sales,1000,500", today=date(2024, 3, 10))

    content = csv_service.export_sales(db, org.id, owner, "2024-03", today=date(2024, 3, 10)).decode("utf-8")

    lines = content.splitlines()
    assert lines[0] == ",".join(csv_service.EXPORT_HEADERS)
    assert lines[1] == "Downtown,Sales,1000,500,50.00%,1550.00,50.00,2024-03-10"


def test_export_xlsx(db, org, store, kpi, owner):
    content = csv_service.export_sales(db, org.id, owner, "2024-03", fmt="xlsx", today=date(2024, 3, 10))

    frame = pd.read_excel(BytesIO(content))
    assert list(frame.columns) == csv_service.EXPORT_HEADERS
    assert frame.iloc[0]["Store"] == "Downtown"
