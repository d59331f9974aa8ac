# state.py — Shared PortalState schema
# TypedDict definition for state passed between pipeline nodes
"""
state.py — Pipeline State Schema

Defines the TypedDict structure for state passed between LangGraph nodes.
One state object is one input snapshot: a new dataset, search text, metric
selection or filter toggle means a new state and a full re-run.
"""

from __future__ import annotations

from typing import Callable, Sequence, TypedDict

from inference.models import (
    FieldClassification,
    GroupedCountRow,
    HistogramBin,
    MetricOption,
    SummaryStats,
)
from settings.portal_config import PortalConfig, load_config


class PortalState(TypedDict, total=False):
    """
    Shared state passed between all pipeline nodes.

    All fields are optional (total=False) to support partial updates.
    """

    # =========================================================================
    # INPUT LAYER
    # =========================================================================
    raw_file: bytes | None  # Raw result file bytes (when rows are not given)
    filename: str | None  # Original filename
    rows: Sequence[dict] | None  # Pre-parsed dataset (takes precedence)
    search: str  # Search box text
    active_metric_keys: list[str]  # User-selected chart metrics
    only_with_metric: bool  # Hide rows without a value for the filter metric
    selected_record_id: str | None  # Record to open (by id field value)
    config: PortalConfig

    # =========================================================================
    # DATA LAYER
    # =========================================================================
    dataset: list[dict] | None  # Validated dataset snapshot
    row_count: int
    col_count: int

    # =========================================================================
    # CLASSIFICATION LAYER
    # =========================================================================
    classification: FieldClassification | None

    # =========================================================================
    # METRIC LAYER
    # =========================================================================
    metric_options: list[MetricOption] | None
    default_metric_key: str | None
    chart_metric_keys: list[str]
    filter_metric_key: str | None

    # =========================================================================
    # VIEW LAYER
    # =========================================================================
    filtered_rows: list[dict] | None
    summary: SummaryStats | None
    histogram: list[HistogramBin] | None
    grouped_counts: list[GroupedCountRow] | None
    subject_max: dict[str, float] | None
    selected_record: dict | None
    record_overview: list[dict] | None
    record_detail: dict | None
    warnings: list[str]

    # =========================================================================
    # OUTPUT LAYER
    # =========================================================================
    ui_payload: dict | None  # JSON-safe views for the presentation layer

    # =========================================================================
    # CONTROL LAYER
    # =========================================================================
    current_node: str | None
    progress: float  # 0.0 - 1.0
    progress_message: str | None

    # =========================================================================
    # ERROR LAYER
    # =========================================================================
    error: str | None
    error_type: str | None
    failed_node: str | None
    partial_results: bool
    recovery_hint: str | None

    # =========================================================================
    # CALLBACKS (not persisted)
    # =========================================================================
    progress_callback: Callable[[dict], None] | None


def create_initial_state(
    rows: Sequence[dict] | None = None,
    raw_file: bytes | None = None,
    filename: str | None = None,
    search: str = "",
    active_metric_keys: Sequence[str] | None = None,
    only_with_metric: bool = False,
    selected_record_id: str | None = None,
    config: PortalConfig | None = None,
    progress_callback: Callable[[dict], None] | None = None,
) -> PortalState:
    """
    Create a fresh PortalState for one input snapshot.

    Args:
        rows: Pre-parsed dataset (ordered row mappings)
        raw_file: Raw result file bytes, used when rows is None
        filename: Original filename for raw_file
        search: Search box text
        active_metric_keys: Selected chart metrics (empty → default metric)
        only_with_metric: Keep only rows with a value for the filter metric
        selected_record_id: Id value of the record to open
        config: Pipeline configuration (defaults to load_config())
        progress_callback: Optional callback for progress updates

    Returns:
        Initialized PortalState dict
    """
    config = config or load_config()

    return PortalState(
        # Input
        raw_file=raw_file,
        filename=filename,
        rows=rows,
        search=search,
        active_metric_keys=list(active_metric_keys or []),
        only_with_metric=only_with_metric,
        selected_record_id=selected_record_id or config.default_record_id,
        config=config,

        # Data
        dataset=None,
        row_count=0,
        col_count=0,

        # Classification
        classification=None,

        # Metrics
        metric_options=None,
        default_metric_key=None,
        chart_metric_keys=[],
        filter_metric_key=None,

        # Views
        filtered_rows=None,
        summary=None,
        histogram=None,
        grouped_counts=None,
        subject_max=None,
        selected_record=None,
        record_overview=None,
        record_detail=None,
        warnings=[],

        # Output
        ui_payload=None,

        # Control
        current_node=None,
        progress=0.0,
        progress_message=None,

        # Error
        error=None,
        error_type=None,
        failed_node=None,
        partial_results=False,
        recovery_hint=None,

        # Callbacks
        progress_callback=progress_callback,
    )
