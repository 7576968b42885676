"""Streamlit front-end for the portfolio reporting pipeline."""
from __future__ import annotations

import asyncio
from datetime import datetime
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Sequence

import pandas as pd
import streamlit as st

from devtrack_reports import (
    ExcelSnapshotRepository,
    FormatEmitter,
    GenerateReportUseCase,
    JsonSnapshotRepository,
    ReportContext,
    ReportFailure,
    ReportFormat,
    ReportKind,
    ReportOptions,
    ReportRequest,
)
from devtrack_reports.config import SETTINGS
from devtrack_reports.domain.builders.cashflow import cashflow_series
from devtrack_reports.domain.errors import SnapshotUnavailableError
from devtrack_reports.domain.models import CashflowFilter, DevelopmentRecord
from devtrack_reports.domain.periods import MONTH, WEEK
from devtrack_reports.domain.windows import PeriodRange, range_choices
from devtrack_reports.infrastructure.storage import vat_rate_store
from devtrack_reports.logging_config import configure_logging
from devtrack_reports.presentation.report_preview import model_to_frames, render_html, series_to_frame

configure_logging()

st.set_page_config(page_title="DevTrack Reports", layout="wide")
st.title("DevTrack Portfolio Reports")

REPORT_LABELS = {
    ReportKind.LOOKAHEAD: "12-Week Lookahead",
    ReportKind.SALES_ACTIVITY: "Sales Activity (4 weeks)",
    ReportKind.CASHFLOW: "Cashflow",
    ReportKind.DEVELOPMENT: "Development Detail",
    ReportKind.UNITS_EXPORT: "Units Export",
}
RANGE_LABELS = {
    "all": "All time",
    "last6": "Last 6 months",
    "last12": "Last 12 months",
    "custom": "Custom",
}


def snapshot_repository(name: str, data: bytes):
    if name.lower().endswith(".json"):
        return JsonSnapshotRepository(BytesIO(data))
    return ExcelSnapshotRepository(BytesIO(data))


def load_developments(name: str, data: bytes) -> Sequence[DevelopmentRecord]:
    return asyncio.run(snapshot_repository(name, data).list_developments())


def load_vat_dataframe() -> pd.DataFrame:
    rates = vat_rate_store.load_vat_rates()
    return pd.DataFrame(
        [{"unit_type": unit_type, "rate": float(rate)} for unit_type, rate in sorted(rates.items())],
        columns=["unit_type", "rate"],
    )


def period_range_input(label: str, key: str) -> PeriodRange:
    choices = range_choices(datetime.now(SETTINGS.timezone).date())
    preset = st.selectbox(label, choices, format_func=lambda value: RANGE_LABELS.get(value, value), key=key)
    from_month = to_month = None
    if preset == "custom":
        col1, col2 = st.columns(2)
        with col1:
            from_month = st.text_input("From month (YYYY-MM)", key=f"{key}_from")
        with col2:
            to_month = st.text_input("To month (YYYY-MM)", key=f"{key}_to")
    return PeriodRange.parse(preset, from_month, to_month)


def run_report(name: str, data: bytes, request: ReportRequest):
    context = ReportContext(repository=snapshot_repository(name, data), emitter=FormatEmitter())
    return asyncio.run(GenerateReportUseCase(context).execute(request))


if "result" not in st.session_state:
    st.session_state["result"] = None

snapshot_file = st.file_uploader("Upload portfolio snapshot", type=["json", "xlsx"])
developments: Sequence[DevelopmentRecord] = []
if snapshot_file is not None:
    snapshot_bytes = snapshot_file.getvalue()
    try:
        developments = load_developments(snapshot_file.name, snapshot_bytes)
    except SnapshotUnavailableError as exc:
        st.error(str(exc))
    else:
        st.caption(f"{len(developments)} developments, {sum(len(dev.units) for dev in developments)} units loaded")

with st.expander("VAT rates by unit type"):
    vat_df = st.data_editor(load_vat_dataframe(), num_rows="dynamic", hide_index=True, key="vat_editor")
    if st.button("Save VAT rates", key="save_vat_btn"):
        cleaned: dict[str, Decimal] = {}
        for _, row in vat_df.iterrows():
            unit_type = str(row.get("unit_type") or "").strip()
            try:
                rate = Decimal(str(row.get("rate")))
            except InvalidOperation:
                continue
            if unit_type:
                cleaned[unit_type] = rate
        vat_rate_store.save_vat_rates(cleaned)
        st.success("VAT rates saved; they apply from the next start of the app")

tabs = st.tabs(["Reports", "Cash-flow monitoring"])

with tabs[0]:
    kind = st.selectbox("Report", list(REPORT_LABELS), format_func=REPORT_LABELS.get)
    fmt = st.radio("Format", [item for item in ReportFormat], format_func=lambda item: item.value.upper(), horizontal=True)
    names = {dev.id: dev.name for dev in developments}

    options = ReportOptions()
    if kind is ReportKind.DEVELOPMENT:
        development_id = st.selectbox("Development", list(names), format_func=names.get)
        options = ReportOptions(development_id=development_id)
    else:
        selected = st.multiselect("Developments (empty means all)", list(names), format_func=names.get)
        period_range = PeriodRange()
        if kind is ReportKind.CASHFLOW:
            period_range = period_range_input("Period", "report_range")
        options = ReportOptions(selected_ids=tuple(selected), period_range=period_range)

    run_btn = st.button("Generate report", disabled=snapshot_file is None or not developments)
    if run_btn and snapshot_file is not None:
        with st.spinner("Generating..."):
            result = run_report(snapshot_file.name, snapshot_file.getvalue(), ReportRequest(kind=kind, fmt=fmt, options=options))
        if isinstance(result, ReportFailure):
            st.error(f"Report failed ({result.reason}): {result.message}")
        else:
            st.session_state["result"] = result

    result = st.session_state.get("result")
    if result:
        for item in result.files:
            st.download_button(f"Download {item.name}", data=item.content, file_name=item.name, mime=item.media_type)
        for title, frame in model_to_frames(result.model):
            st.subheader(title)
            st.dataframe(frame, hide_index=True)
        st.download_button(
            "Download HTML preview",
            data=render_html(result.model).encode("utf-8"),
            file_name="report_preview.html",
            mime="text/html",
        )

with tabs[1]:
    if not developments:
        st.info("Upload a snapshot to see the cash-flow series.")
    else:
        granularity = st.radio("Granularity", [MONTH, WEEK], format_func=str.title, horizontal=True)
        series_range = period_range_input("Range", "series_range")
        all_types = sorted({unit.unit_type for dev in developments for unit in dev.units})
        all_beds = sorted({unit.bedrooms for dev in developments for unit in dev.units})
        filters = CashflowFilter(
            development_names=tuple(st.multiselect("Developments", sorted(dev.name for dev in developments))),
            unit_types=tuple(st.multiselect("Unit types", all_types)),
            bedrooms=tuple(st.multiselect("Bedrooms", all_beds)),
        )
        series = cashflow_series(
            developments,
            datetime.now(SETTINGS.timezone).date(),
            granularity=granularity,
            period_range=series_range,
            filters=filters,
        )
        frame = series_to_frame(series)
        if frame.empty:
            st.info("No units with a close date in the selected range.")
        else:
            st.bar_chart(frame.drop(columns=["Total"]))
            st.dataframe(frame)
