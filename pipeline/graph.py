# graph.py — LangGraph workflow definition
# Defines state machine, node edges, and conditional routing
"""
graph.py — LangGraph Workflow Definition

Wires the inference nodes into a single recomputation graph with error
routing. One invocation = one input snapshot; nothing carries over between
runs.

Flow:
    START → ingest → classify → resolve_metrics → select_rows → aggregate → payload → END
               ↓         ↓             ↓               ↓            ↓
            [ERROR] → [ERROR] →     [ERROR] →      [ERROR] →    [ERROR] → handle_error → END

Any node that sets state["error"] routes to handle_error_node.
"""

from __future__ import annotations

from typing import Callable, Literal, Sequence

from langgraph.graph import END, START, StateGraph

from pipeline.nodes import (
    aggregate_views_node,
    build_payload_node,
    classify_fields_node,
    handle_error_node,
    ingest_data_node,
    resolve_metrics_node,
    select_rows_node,
)
from pipeline.state import PortalState, create_initial_state
from settings.portal_config import PortalConfig, configure_logging, load_config


# Happy path, in order; each step routes to handle_error on failure
PIPELINE_STEPS = [
    ("ingest_data", ingest_data_node),
    ("classify_fields", classify_fields_node),
    ("resolve_metrics", resolve_metrics_node),
    ("select_rows", select_rows_node),
    ("aggregate_views", aggregate_views_node),
]


# =============================================================================
# CONDITIONAL ROUTING
# =============================================================================

def route_after_node(state: PortalState) -> Literal["continue", "error"]:
    """
    Conditional router: check if error occurred, route accordingly.

    Returns:
        "error" if state has error, "continue" otherwise
    """
    if state.get("error"):
        return "error"
    return "continue"


# =============================================================================
# GRAPH BUILDER
# =============================================================================

def build_portal_graph() -> StateGraph:
    """
    Build the LangGraph workflow for one recomputation pass.

    Returns:
        Uncompiled StateGraph
    """
    workflow = StateGraph(PortalState)

    for name, node in PIPELINE_STEPS:
        workflow.add_node(name, node)
    workflow.add_node("build_payload", build_payload_node)
    workflow.add_node("handle_error", handle_error_node)

    workflow.add_edge(START, PIPELINE_STEPS[0][0])

    # step → next step OR handle_error
    next_names = [name for name, _ in PIPELINE_STEPS[1:]] + ["build_payload"]
    for (name, _), next_name in zip(PIPELINE_STEPS, next_names):
        workflow.add_conditional_edges(
            name,
            route_after_node,
            {
                "continue": next_name,
                "error": "handle_error",
            },
        )

    workflow.add_edge("build_payload", END)
    workflow.add_edge("handle_error", END)

    return workflow


def compile_portal_graph():
    """
    Build and compile the pipeline graph.

    Returns:
        Compiled graph ready for .invoke() or .stream()
    """
    return build_portal_graph().compile()


# =============================================================================
# GRAPH EXECUTION
# =============================================================================

_compiled_graph = None


def get_compiled_graph():
    """
    Get or create the compiled graph singleton.

    The graph holds no data, so one compiled instance serves every run.
    """
    global _compiled_graph
    if _compiled_graph is None:
        _compiled_graph = compile_portal_graph()
    return _compiled_graph


def run_pipeline(
    rows: Sequence[dict] | None = None,
    raw_file: bytes | None = None,
    filename: str | None = None,
    search: str = "",
    active_metric_keys: Sequence[str] | None = None,
    only_with_metric: bool = False,
    selected_record_id: str | None = None,
    config: PortalConfig | None = None,
    progress_callback: Callable[[dict], None] | None = None,
) -> dict:
    """
    Recompute every derived view for one input snapshot.

    This is the main entry point for the presentation layer: call it again
    whenever the dataset, search text, metric selection or filter toggle
    changes.

    Returns:
        Final PortalState dict with ui_payload containing views or error

    Example:
        result = run_pipeline(rows=records, search="alice")

        if result["ui_payload"]["is_error"]:
            show_error(result["ui_payload"]["error_message"])
        else:
            render(result["ui_payload"])
    """
    config = config or load_config()
    configure_logging(config)

    initial_state = create_initial_state(
        rows=rows,
        raw_file=raw_file,
        filename=filename,
        search=search,
        active_metric_keys=active_metric_keys,
        only_with_metric=only_with_metric,
        selected_record_id=selected_record_id,
        config=config,
        progress_callback=progress_callback,
    )

    graph = get_compiled_graph()
    return graph.invoke(initial_state)


def stream_pipeline(
    rows: Sequence[dict] | None = None,
    raw_file: bytes | None = None,
    filename: str | None = None,
    search: str = "",
    active_metric_keys: Sequence[str] | None = None,
    only_with_metric: bool = False,
    selected_record_id: str | None = None,
    config: PortalConfig | None = None,
    progress_callback: Callable[[dict], None] | None = None,
):
    """
    Stream the pipeline, yielding state after each node.

    Yields:
        Tuple of (node_name, state_snapshot) after each node execution
    """
    config = config or load_config()
    configure_logging(config)

    initial_state = create_initial_state(
        rows=rows,
        raw_file=raw_file,
        filename=filename,
        search=search,
        active_metric_keys=active_metric_keys,
        only_with_metric=only_with_metric,
        selected_record_id=selected_record_id,
        config=config,
        progress_callback=progress_callback,
    )

    graph = get_compiled_graph()
    accumulated_state = dict(initial_state)

    for event in graph.stream(initial_state):
        for node_name, state_update in event.items():
            accumulated_state.update(state_update or {})
            yield node_name, accumulated_state


# =============================================================================
# GRAPH VISUALIZATION (Development Only)
# =============================================================================

def get_graph_mermaid() -> str:
    """
    Get Mermaid diagram representation of the graph.

    Returns:
        Mermaid diagram string
    """
    graph = get_compiled_graph()
    try:
        return graph.get_graph().draw_mermaid()
    except Exception:
        # Fallback manual diagram
        return """
graph TD
    START --> ingest_data
    ingest_data -->|success| classify_fields
    ingest_data -->|error| handle_error
    classify_fields -->|success| resolve_metrics
    classify_fields -->|error| handle_error
    resolve_metrics -->|success| select_rows
    resolve_metrics -->|error| handle_error
    select_rows -->|success| aggregate_views
    select_rows -->|error| handle_error
    aggregate_views -->|success| build_payload
    aggregate_views -->|error| handle_error
    build_payload --> END
    handle_error --> END
"""
