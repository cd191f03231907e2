"""Email Triage -- Streamlit UI.

Multi-page application for classifying emails, reviewing the latest result,
and browsing the server history and statistics.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import streamlit as st

from src.client.accessors import RemoteHistoryView, RemoteStatsView
from src.client.api_client import APIClient
from src.client.errors import ClientError
from src.client.models import Classification
from src.config import settings
from src.store.models import ClassificationResult, PendingFile, to_percentage
from src.store.persistence import StatePersistence
from src.store.result_store import LocalResultStore
from src.submission import SubmissionFlow
from src.ui.formatting import (
    build_history_export,
    build_result_export,
    format_file_size,
    format_relative_time,
    truncate_text,
)

logging.basicConfig(level=settings.log_level)

T = TypeVar("T")


def _with_client(action: Callable[[APIClient], Awaitable[T]]) -> T:
    """Run ``action`` against a short-lived client on a fresh event loop."""

    async def _run() -> T:
        async with APIClient(settings.api_url, timeout=settings.request_timeout) as client:
            return await action(client)

    return asyncio.run(_run())


# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(page_title="Email Triage", layout="wide")

if "store" not in st.session_state:
    st.session_state.store = LocalResultStore(
        StatePersistence(settings.store_path),
        history_limit=settings.history_limit,
    )
store: LocalResultStore = st.session_state.store

# ---------------------------------------------------------------------------
# Sidebar -- navigation + API status
# ---------------------------------------------------------------------------
with st.sidebar:
    st.title("Email Triage")
    st.markdown("---")

    page = st.radio(
        "Navigate",
        ["Analyze", "Result", "History", "Statistics"],
        label_visibility="collapsed",
    )

    st.markdown("---")

    api_healthy = _with_client(lambda client: client.health_check())
    if api_healthy:
        st.markdown(":green_circle: API connected")
    else:
        st.markdown(":red_circle: API unreachable")

    local = store.stats
    st.caption(
        f"This session: {local.total_processed} analysed, "
        f"{local.average_confidence}% avg confidence"
    )

# ---------------------------------------------------------------------------
# Page: Analyze
# ---------------------------------------------------------------------------
if page == "Analyze":
    st.header("Analyze Email")

    tab_file, tab_text = st.tabs(["File upload", "Direct text"])
    with tab_file:
        uploaded_file = st.file_uploader("Choose a file", type=["txt", "pdf"])
        if uploaded_file is not None:
            store.set_file(
                PendingFile(
                    name=uploaded_file.name,
                    data=uploaded_file.getvalue(),
                    content_type=uploaded_file.type,
                )
            )
            st.write(f"**{uploaded_file.name}** ({format_file_size(uploaded_file.size)})")
    with tab_text:
        text = st.text_area("Email content", value=store.current_input.text, height=240)
        store.set_text(text)
        st.caption(f"{len(text)}/10,000 characters")

    if st.button("Analyze", disabled=store.current_input.is_empty or store.is_processing):
        if not api_healthy:
            st.error("Cannot analyze: the API server is not reachable.")
        else:
            try:
                with st.spinner("Analyzing..."):
                    result = _with_client(
                        lambda client: SubmissionFlow(client, store).submit_pending()
                    )
                st.success("Email analyzed successfully.")
                st.write(f"**{result.classification.value.title()}** ({result.percentage}%)")
            except ClientError as e:
                st.error(f"Error: {e.message}")

# ---------------------------------------------------------------------------
# Page: Result
# ---------------------------------------------------------------------------
elif page == "Result":
    st.header("Latest Result")
    current = store.current_result
    if current is None:
        st.info("No result yet. Analyze an email to get started.")
    else:
        col_a, col_b = st.columns(2)
        col_a.metric("Classification", current.classification.value.title())
        col_b.metric("Confidence", f"{current.percentage}%")
        st.progress(current.percentage / 100)
        st.subheader("Suggested response")
        st.write(current.suggested_response)
        st.download_button(
            "Download result",
            data=json.dumps(build_result_export(current), indent=2),
            file_name=f"email-analysis-{current.timestamp.date().isoformat()}.json",
            mime="application/json",
        )

# ---------------------------------------------------------------------------
# Page: History (server-side)
# ---------------------------------------------------------------------------
elif page == "History":
    st.header("History")

    if not api_healthy:
        st.warning("The API server is not reachable. Cannot load history.")
    else:
        filter_label = st.radio(
            "Filter", ["All", "Productive", "Unproductive"], horizontal=True
        )
        classification = None if filter_label == "All" else Classification(filter_label.lower())

        col_a, col_b = st.columns(2)
        clear_clicked = col_a.button("Clear server history")

        async def _load(client: APIClient) -> tuple[RemoteHistoryView, str | None]:
            view = RemoteHistoryView(client, limit=settings.remote_history_limit)
            await view.activate()
            clear_error = None
            if clear_clicked:
                try:
                    await view.clear()
                except ClientError as e:
                    clear_error = e.message
            return view, clear_error

        view, clear_error = _with_client(_load)
        if clear_clicked:
            if clear_error:
                st.error(clear_error)
            else:
                st.success("History cleared.")

        displayed = view.filtered(classification)
        col_b.download_button(
            "Export history",
            data=json.dumps(
                build_history_export(
                    ClassificationResult.from_record(item, item.content) for item in displayed
                ),
                indent=2,
            ),
            file_name="email-history.json",
            mime="application/json",
            disabled=not displayed,
        )

        if view.error:
            st.error(view.error)
        elif not view.items:
            st.info("No history yet.")
        else:
            counts = view.counts()
            st.caption(
                f"{counts['all']} total, {counts['productive']} productive, "
                f"{counts['unproductive']} unproductive"
            )
            for item in displayed:
                with st.expander(
                    f"{item.classification.value.title()} ({to_percentage(item.confidence)}%) "
                    f"-- {format_relative_time(item.analysis_timestamp)}"
                ):
                    st.write(truncate_text(item.content, 300))
                    st.markdown("---")
                    st.write(item.suggested_response)

# ---------------------------------------------------------------------------
# Page: Statistics (server-side)
# ---------------------------------------------------------------------------
elif page == "Statistics":
    st.header("Statistics")

    async def _load_stats(client: APIClient) -> RemoteStatsView:
        view = RemoteStatsView(client)
        await view.activate()
        return view

    stats_view = _with_client(_load_stats)
    if stats_view.error or stats_view.value is None:
        st.error(stats_view.error or "Statistics unavailable.")
    else:
        stats = stats_view.value
        cols = st.columns(4)
        cols[0].metric("Processed", stats.total_processed)
        cols[1].metric("Productive", stats.productive_count)
        cols[2].metric("Unproductive", stats.unproductive_count)
        cols[3].metric("Avg confidence", f"{stats.average_confidence}%")
