# nodes.py — Pipeline node functions
# Steps: ingest → classify → resolve metrics → select rows → aggregate → payload
"""
nodes.py — LangGraph Pipeline Nodes

Each node is a pure function that takes PortalState and returns state
updates. Nothing is patched incrementally: every run rebuilds every view
from the input snapshot.

Node Responsibilities:
- ingest_data_node: Accept pre-parsed rows or load them from a result file
- classify_fields_node: Text/numeric detection, id/primary fields, subjects
- resolve_metrics_node: Metric options and the charted metric keys
- select_rows_node: Apply search and the only-with-metric toggle
- aggregate_views_node: Summary, histogram, grouped counts, record detail
- build_payload_node: JSON-safe payload for the presentation layer
- handle_error_node: Error payload with any partial results

All nodes are defensive and never crash the graph.
"""

from __future__ import annotations

import logging

from inference.aggregator import (
    group_by_metrics,
    histogram,
    subject_max_map,
    summarize,
)
from inference.classifier import classify_fields
from inference.data_loader import load_records
from inference.models import FieldClassification, schema_fields
from inference.validators import (
    sanitize_dict_for_json,
    sanitize_metric_keys,
    sanitize_search_query,
    validate_file_extension,
    validate_records,
)
from inference.views import (
    chart_metric_keys,
    default_metric_key,
    filter_rows,
    find_initial_record,
    metric_options,
    record_detail,
    record_overview,
)
from settings.portal_config import PortalConfig


logger = logging.getLogger(__name__)


# =============================================================================
# PROGRESS HELPERS
# =============================================================================

def _emit_progress(
    state: dict,
    node: str,
    progress: float,
    message: str,
    status: str = "running",
) -> None:
    """
    Emit a progress update via the callback if available.

    Args:
        state: Current pipeline state
        node: Current node name
        progress: Progress value (0.0 - 1.0)
        message: Human-readable progress message
        status: "running" | "complete" | "failed"
    """
    callback = state.get("progress_callback")
    if callback and callable(callback):
        try:
            callback({
                "node": node,
                "status": status,
                "progress": progress,
                "message": message,
            })
        except Exception:
            logger.exception("Progress callback failed in %s", node)


def _create_error_state(
    state: dict,
    node: str,
    error_msg: str,
    error_type: str,
    recovery_hint: str,
) -> dict:
    """
    Create state update for error routing.
    """
    logger.warning("%s failed (%s): %s", node, error_type, error_msg)
    return {
        "error": error_msg,
        "error_type": error_type,
        "failed_node": node,
        "recovery_hint": recovery_hint,
        "current_node": node,
        "partial_results": _has_partial_results(state),
    }


def _has_partial_results(state: dict) -> bool:
    """Check if state has any usable partial results."""
    return any([
        state.get("classification"),
        state.get("metric_options"),
        state.get("summary"),
        state.get("histogram"),
        state.get("grouped_counts"),
    ])


def _config(state: dict) -> PortalConfig:
    return state.get("config") or PortalConfig()


# =============================================================================
# NODE: INGEST DATA
# =============================================================================

def ingest_data_node(state: dict) -> dict:
    """
    Accept the dataset for this run.

    Input state:
        - rows: list[dict] (preferred), or
        - raw_file: bytes + filename: str

    Output state updates:
        - dataset: list[dict]
        - row_count: int
        - col_count: int (first-row schema width)

    On error:
        - error, error_type, failed_node, recovery_hint
    """
    node_name = "ingest_data"
    _emit_progress(state, node_name, 0.02, "Loading results...")

    rows = state.get("rows")
    warnings = list(state.get("warnings", []))

    if rows is None:
        raw_file = state.get("raw_file")
        filename = state.get("filename") or "result.xlsx"

        if raw_file is None:
            return _create_error_state(
                state, node_name,
                "No dataset provided",
                "DATA_MISSING",
                "Provide parsed rows or a result file to analyze.",
            )

        is_valid_ext, ext_error = validate_file_extension(filename)
        if not is_valid_ext:
            return _create_error_state(
                state, node_name,
                ext_error,
                "DATA_INVALID",
                "Please provide a CSV or Excel result sheet.",
            )

        _emit_progress(state, node_name, 0.05, "Parsing result sheet...")
        rows, load_error = load_records(raw_file, filename)
        if load_error:
            return _create_error_state(
                state, node_name,
                load_error,
                "DATA_INVALID",
                "Check that the first sheet holds one header row followed by records.",
            )

    is_valid, rows_error = validate_records(rows)
    if not is_valid:
        return _create_error_state(
            state, node_name,
            rows_error,
            "DATA_INVALID",
            "Rows must be a list of field → value mappings.",
        )

    dataset = list(rows)
    if not dataset:
        warnings.append("Dataset is empty; all views are empty")

    _emit_progress(state, node_name, 0.10, "Results loaded", "complete")

    return {
        "dataset": dataset,
        "row_count": len(dataset),
        "col_count": len(schema_fields(dataset)),
        "warnings": warnings,
        "current_node": node_name,
        "progress": 0.10,
        "progress_message": f"Loaded {len(dataset):,} rows",
    }


# =============================================================================
# NODE: CLASSIFY FIELDS
# =============================================================================

def classify_fields_node(state: dict) -> dict:
    """
    Classify columns and extract subjects.

    Input state:
        - dataset: list[dict] (required)

    Output state updates:
        - classification: FieldClassification
        - warnings: list[str] (extended)
    """
    node_name = "classify_fields"
    _emit_progress(state, node_name, 0.15, "Classifying columns...")

    dataset = state.get("dataset")
    if dataset is None:
        return _create_error_state(
            state, node_name,
            "No dataset available for classification",
            "DATA_MISSING",
            "Reload the result sheet.",
        )

    try:
        classification = classify_fields(dataset)
    except Exception as e:
        return _create_error_state(
            state, node_name,
            f"Field classification failed: {str(e)}",
            "ANALYSIS_FAILED",
            "The sheet structure could not be analyzed. Check the header row.",
        )

    warnings = list(state.get("warnings", []))
    if dataset and not classification.primary_numeric_field:
        warnings.append("No numeric column found; summary statistics are unavailable")
    if dataset and not classification.subject_fields:
        warnings.append("No subject columns detected")

    _emit_progress(state, node_name, 0.35, "Columns classified", "complete")

    return {
        "classification": classification,
        "warnings": warnings,
        "current_node": node_name,
        "progress": 0.35,
        "progress_message": f"Found {len(classification.subject_fields)} subjects",
    }


# =============================================================================
# NODE: RESOLVE METRICS
# =============================================================================

def resolve_metrics_node(state: dict) -> dict:
    """
    Resolve which metrics are selectable and which are charted.

    Input state:
        - classification: FieldClassification (required)
        - active_metric_keys: list[str]

    Output state updates:
        - metric_options, default_metric_key, chart_metric_keys,
          filter_metric_key
    """
    node_name = "resolve_metrics"
    _emit_progress(state, node_name, 0.40, "Resolving metrics...")

    classification = state.get("classification")
    if classification is None:
        return _create_error_state(
            state, node_name,
            "No field classification available",
            "DATA_MISSING",
            "Reload the result sheet.",
        )

    options = metric_options(
        classification.primary_numeric_field,
        classification.subject_fields,
    )
    default_key = default_metric_key(
        classification.primary_numeric_field,
        classification.subject_fields,
    )

    requested = state.get("active_metric_keys") or []
    active = sanitize_metric_keys(requested, [o.key for o in options])

    warnings = list(state.get("warnings", []))
    dropped = [k for k in requested if k not in active]
    if dropped:
        warnings.append(f"Ignored unknown metrics: {', '.join(map(str, dropped))}")

    chart_keys = chart_metric_keys(active, default_key)

    return {
        "metric_options": options,
        "default_metric_key": default_key,
        "chart_metric_keys": chart_keys,
        "filter_metric_key": chart_keys[0] if chart_keys else None,
        "warnings": warnings,
        "current_node": node_name,
        "progress": 0.50,
        "progress_message": f"Charting {len(chart_keys)} metric(s)",
    }


# =============================================================================
# NODE: SELECT ROWS
# =============================================================================

def select_rows_node(state: dict) -> dict:
    """
    Apply the search text and the only-with-metric toggle.

    Output state updates:
        - filtered_rows: list[dict]
    """
    node_name = "select_rows"
    _emit_progress(state, node_name, 0.55, "Filtering rows...")

    dataset = state.get("dataset") or []
    config = _config(state)
    search = sanitize_search_query(state.get("search"), config.max_search_length)

    filtered = filter_rows(
        dataset,
        search=search,
        only_with_metric=bool(state.get("only_with_metric")),
        metric_key=state.get("filter_metric_key"),
    )

    return {
        "filtered_rows": filtered,
        "current_node": node_name,
        "progress": 0.60,
        "progress_message": f"Showing {len(filtered):,} matching record(s)",
    }


# =============================================================================
# NODE: AGGREGATE VIEWS
# =============================================================================

def aggregate_views_node(state: dict) -> dict:
    """
    Compute every aggregate view.

    Summary and subject maxima use the full dataset; histogram and grouped
    counts use the filtered rows.

    Output state updates:
        - summary, histogram, grouped_counts, subject_max,
          selected_record, record_overview, record_detail
    """
    node_name = "aggregate_views"
    _emit_progress(state, node_name, 0.65, "Aggregating...")

    dataset = state.get("dataset") or []
    filtered = state.get("filtered_rows")
    if filtered is None:
        filtered = dataset
    classification = state.get("classification") or FieldClassification()
    chart_keys = state.get("chart_metric_keys") or []
    config = _config(state)

    try:
        summary = summarize(dataset, classification.primary_numeric_field)
        bins = histogram(
            filtered,
            chart_keys[0] if chart_keys else None,
            config.histogram_bins,
        )
        grouped = group_by_metrics(filtered, chart_keys, config.bucket_decimals)
        subject_max = subject_max_map(dataset, classification.subject_fields)
    except Exception as e:
        return _create_error_state(
            state, node_name,
            f"Aggregation failed: {str(e)}",
            "ANALYSIS_FAILED",
            "Try a different metric selection.",
        )

    _emit_progress(state, node_name, 0.80, "Building record detail...")

    selected = find_initial_record(
        dataset,
        classification.id_field,
        state.get("selected_record_id"),
    )

    return {
        "summary": summary,
        "histogram": bins,
        "grouped_counts": grouped,
        "subject_max": subject_max,
        "selected_record": selected,
        "record_overview": record_overview(selected, classification.subject_fields),
        "record_detail": record_detail(
            selected,
            classification,
            subject_max,
            config.max_extra_fields,
        ),
        "current_node": node_name,
        "progress": 0.85,
        "progress_message": f"{summary.total_students:,} records summarized",
    }


# =============================================================================
# NODE: BUILD PAYLOAD
# =============================================================================

def build_payload_node(state: dict) -> dict:
    """
    Assemble the JSON-safe payload consumed by the presentation layer.

    Output state updates:
        - ui_payload: dict
    """
    node_name = "build_payload"
    classification = state.get("classification") or FieldClassification()

    payload = {
        "is_error": False,
        "fields": {
            "id_field": classification.id_field,
            "primary_text_field": classification.primary_text_field,
            "primary_numeric_field": classification.primary_numeric_field,
            "text_fields": classification.text_fields,
            "numeric_fields": classification.numeric_fields,
        },
        "subjects": classification.subject_fields,
        "metric_options": state.get("metric_options") or [],
        "chart_metric_keys": state.get("chart_metric_keys") or [],
        "summary": state.get("summary"),
        "histogram": state.get("histogram") or [],
        "grouped_counts": state.get("grouped_counts") or [],
        "subject_max": state.get("subject_max") or {},
        "filtered_count": len(state.get("filtered_rows") or []),
        "record_detail": state.get("record_detail"),
        "record_overview": state.get("record_overview") or [],
        "warnings": state.get("warnings", []),
    }

    _emit_progress(state, node_name, 1.0, "Views ready", "complete")

    return {
        "ui_payload": sanitize_dict_for_json(payload),
        "current_node": node_name,
        "progress": 1.0,
        "progress_message": "Views ready",
    }


# =============================================================================
# NODE: HANDLE ERROR
# =============================================================================

def handle_error_node(state: dict) -> dict:
    """
    Handle errors gracefully and prepare the error payload.

    Input state:
        - error, error_type, failed_node, recovery_hint, partial_results

    Output state updates:
        - ui_payload: dict (error payload)
    """
    node_name = "handle_error"
    _emit_progress(state, node_name, 0.99, "Handling error...", "failed")

    error = state.get("error") or "An unknown error occurred"
    error_type = state.get("error_type") or "UNKNOWN"
    has_partial = state.get("partial_results", False)

    error_payload = {
        "is_error": True,
        "error_message": error,
        "error_type": error_type,
        "failed_node": state.get("failed_node") or "unknown",
        "recovery_hint": state.get("recovery_hint") or "Please reload the result sheet.",
        "has_partial_results": has_partial,
    }

    if has_partial:
        error_payload["partial_results"] = {
            "classification": state.get("classification"),
            "metric_options": state.get("metric_options"),
            "summary": state.get("summary"),
            "warnings": state.get("warnings", []) + [f"Views incomplete: {error}"],
        }

    return {
        "ui_payload": sanitize_dict_for_json(error_payload),
        "current_node": node_name,
        "progress": 1.0,
        "progress_message": f"Error: {error_type}",
    }
