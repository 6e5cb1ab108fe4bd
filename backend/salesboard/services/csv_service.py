"""
CSV import and CSV/Excel export of month-to-date sales.

Import rows carry a month-to-date figure per store/KPI and are recorded for
the import day through the daily sales ledger, exactly like a manual edit.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO, StringIO
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.orm import Session

from salesboard.core.month_calendar import date_key as to_date_key, month_key as to_month_key
from salesboard.core.serialization_helpers import format_plain
from salesboard.models.kpi import Kpi
from salesboard.models.store import Store
from salesboard.models.user import User
from salesboard.services import catalog_service
from salesboard.services.daily_sales_service import record_month_to_date_value
from salesboard.services.kpi_metrics import load_month_metrics


logger = logging.getLogger(__name__)

REQUIRED_HEADERS = ["Store", "KPI", "Monthly Goal", "MTD Sales"]

EXPORT_HEADERS = [
    "Store",
    "KPI",
    "Monthly Goal",
    "MTD Sales",
    "% to Goal",
    "Projected EOM",
    "Daily Average",
    "Export Date",
]


@dataclass
class ParsedSalesRow:
    store_name: str
    kpi_name: str
    monthly_goal: float
    mtd_sales: float


@dataclass
class CsvImportResult:
    success: bool = False
    message: str = ""
    new_store_names: List[str] = field(default_factory=list)
    new_kpi_names: List[str] = field(default_factory=list)
    sales_rows: List[ParsedSalesRow] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    imported: int = 0


def _parse_number(raw) -> Optional[float]:
    try:
        number = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def _read_frame(lines: List[str]) -> pd.DataFrame:
    text = "\n".join(lines)
    width = len(pd.read_csv(StringIO(text), nrows=0).columns)
    # Extra trailing fields are dropped; short rows come back padded with NaN
    return pd.read_csv(
        StringIO(text),
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
        engine="python",
        on_bad_lines=lambda fields: fields[:width],
    )


def parse_sales_csv(content: str, existing_stores: List[Store], existing_kpis: List[Kpi]) -> CsvImportResult:
    """
    Validate CSV content. Row errors are collected as "Row N: ..." with the
    header counted as row 1; invalid rows are skipped, valid ones kept.
    Store and KPI names match existing ones case-insensitively.
    """
    result = CsvImportResult()

    lines = [line for line in content.splitlines() if line.strip()]
    if len(lines) < 2:
        result.message = "CSV file must contain a header row and at least one data row"
        return result

    try:
        df = _read_frame(lines)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        result.message = f"Error parsing CSV: {e}"
        return result

    df.columns = [str(c).strip() for c in df.columns]
    missing = [h for h in REQUIRED_HEADERS if h not in df.columns]
    if missing:
        result.message = f"Missing required headers: {', '.join(missing)}"
        return result

    store_map = {s.name.strip().lower(): s.name for s in existing_stores}
    kpi_map = {k.name.strip().lower(): k.name for k in existing_kpis}
    new_stores: Dict[str, str] = {}
    new_kpis: Dict[str, str] = {}

    for idx, row in df.iterrows():
        row_number = idx + 2
        values = [row[h] for h in REQUIRED_HEADERS]
        if any(pd.isna(v) for v in values):
            result.errors.append(f"Row {row_number} has insufficient columns")
            continue

        store_name = str(row["Store"]).strip()
        kpi_name = str(row["KPI"]).strip()
        if not store_name:
            result.errors.append(f"Row {row_number}: Store name is required")
            continue
        if not kpi_name:
            result.errors.append(f"Row {row_number}: KPI name is required")
            continue

        monthly_goal = _parse_number(row["Monthly Goal"])
        if monthly_goal is None:
            result.errors.append(f"Row {row_number}: Monthly Goal must be a number")
            continue
        mtd_sales = _parse_number(row["MTD Sales"])
        if mtd_sales is None:
            result.errors.append(f"Row {row_number}: MTD Sales must be a number")
            continue

        store_key = store_name.lower()
        kpi_key = kpi_name.lower()
        if store_key not in store_map and store_key not in new_stores:
            new_stores[store_key] = store_name
        if kpi_key not in kpi_map and kpi_key not in new_kpis:
            new_kpis[kpi_key] = kpi_name

        result.sales_rows.append(
            ParsedSalesRow(
                store_name=store_map.get(store_key) or new_stores[store_key],
                kpi_name=kpi_map.get(kpi_key) or new_kpis[kpi_key],
                monthly_goal=monthly_goal,
                mtd_sales=mtd_sales,
            )
        )

    result.new_store_names = list(new_stores.values())
    result.new_kpi_names = list(new_kpis.values())

    if result.sales_rows:
        result.success = True
        result.message = f"Successfully validated {len(result.sales_rows)} data rows"
        if new_stores:
            result.message += f", detected {len(new_stores)} new stores"
        if new_kpis:
            result.message += f", detected {len(new_kpis)} new KPIs"
        if result.errors:
            result.message += f" with {len(result.errors)} errors"
    else:
        result.message = "No valid data found in the CSV file"

    return result


def import_sales(
    db: Session,
    org_id: int,
    user: User,
    content: str,
    today: Optional[date] = None,
    dry_run: bool = False,
) -> CsvImportResult:
    """Validate, create missing stores/KPIs and record each row for ``today``."""
    stores = catalog_service.list_stores(db, org_id, user)
    kpis = catalog_service.list_kpis(db, org_id, user)
    result = parse_sales_csv(content, stores, kpis)
    if not result.success or dry_run:
        return result

    store_ids = {s.name.strip().lower(): s.id for s in stores}
    kpi_ids = {k.name.strip().lower(): k.id for k in kpis}
    for name in result.new_store_names:
        store_ids[name.lower()] = catalog_service.create_store(db, org_id, user, name).id
    for name in result.new_kpi_names:
        kpi_ids[name.lower()] = catalog_service.create_kpi(db, org_id, user, name).id

    today = today or date.today()
    day, month = to_date_key(today), to_month_key(today)
    for row in result.sales_rows:
        record_month_to_date_value(
            db,
            org_id,
            store_ids[row.store_name.lower()],
            kpi_ids[row.kpi_name.lower()],
            day,
            month,
            row.mtd_sales,
            row.monthly_goal,
            user,
        )
        result.imported += 1

    logger.info(
        "csv import org=%s rows=%s new_stores=%s new_kpis=%s errors=%s",
        org_id, result.imported, len(result.new_store_names), len(result.new_kpi_names), len(result.errors),
    )
    return result


def generate_csv_template(stores: List[Store], kpis: List[Kpi]) -> str:
    if stores and kpis:
        rows = [
            [store.name, kpi.name, "1000", "500"]
            for store in stores[:2]
            for kpi in kpis[:2]
        ]
    else:
        rows = [
            ["Store A", "Sales", "10000", "5000"],
            ["Store A", "Units", "500", "250"],
            ["Store B", "Sales", "8000", "4200"],
            ["Store B", "Units", "400", "210"],
        ]
    return pd.DataFrame(rows, columns=REQUIRED_HEADERS).to_csv(index=False, lineterminator="\n")


def build_export_frame(metric_rows: List[dict], export_date: date) -> pd.DataFrame:
    records = [
        {
            "Store": r["store_name"],
            "KPI": r["kpi_name"],
            "Monthly Goal": format_plain(r["monthly_goal"]),
            "MTD Sales": format_plain(r["mtd_sales"]),
            "% to Goal": f"{r['percent_to_goal']:.2f}%",
            "Projected EOM": f"{r['projection']:.2f}",
            "Daily Average": f"{r['daily_average']:.2f}",
            "Export Date": export_date.isoformat(),
        }
        for r in metric_rows
    ]
    return pd.DataFrame(records, columns=EXPORT_HEADERS)


def export_sales(
    db: Session,
    org_id: int,
    user: User,
    month_key: str,
    fmt: str = "csv",
    today: Optional[date] = None,
) -> bytes:
    """Every store x KPI for the month as CSV text or an .xlsx workbook."""
    today = today or date.today()
    _, _, rows, _ = load_month_metrics(db, org_id, month_key, user, today=today)
    df = build_export_frame(rows, today)

    if fmt == "xlsx":
        output = BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Sales")
        return output.getvalue()

    return df.to_csv(index=False, lineterminator="\n").encode("utf-8")
