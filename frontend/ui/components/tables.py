"""Row tables and download controls shared by the admin pages.

Every admin page keeps its rows in SessionState under a page key:
None means "not loaded or the last load failed", [] means "no results".
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd
import streamlit as st

from frontend.config.settings import config
from frontend.services import RowsResponse, get_api_client
from frontend.utils import SessionState

logger = logging.getLogger(__name__)

FORMAT_LABELS = {"csv": "CSV", "json": "JSON", "pdf": "PDF"}


def load_rows(page: str, fetch: Callable[[], RowsResponse], **filters: Any) -> Optional[List[dict]]:
    """Run a list call and store its rows for the page.

    ``filters`` are the values the call was made with; they are stored
    beside the rows so a later download matches what is on screen even if
    the filter widgets have changed since. On failure the error is shown
    and the page's rows are reset to None.
    """
    result = fetch()
    if not result.success:
        st.error(result.error or "Failed to load")
        SessionState.reset_rows(page)
        return None

    SessionState.set_rows(page, result.rows, filters)
    SessionState.set_download(page, None)
    if not result.rows:
        st.toast("No results")
    return result.rows


def short_timestamp(value: Any) -> str:
    """First 19 characters of a timestamp with the T removed."""
    if not value:
        return ""
    return str(value)[:19].replace("T", " ")


def rows_to_frame(rows: List[dict], columns: Sequence[Tuple[str, str]]) -> pd.DataFrame:
    """Project rows onto (key, label) columns; missing keys are blank."""
    data = [{label: row.get(key) for key, label in columns} for row in rows]
    return pd.DataFrame(data, columns=[label for _, label in columns])


def render_rows_table(
    rows: List[dict],
    columns: Sequence[Tuple[str, str]],
    strike_completed: bool = False,
) -> None:
    """Render rows; completed bookings can be struck through and greyed."""
    df = rows_to_frame(rows, columns)
    for _, label in columns:
        if label in ("Created", "Attended"):
            df[label] = df[label].map(short_timestamp)

    if strike_completed:
        completed = [bool(row.get("completed")) for row in rows]

        def _style(row: pd.Series) -> List[str]:
            if completed[row.name]:
                return ["text-decoration: line-through; color: #9E9E9E"] * len(row)
            return [""] * len(row)

        st.dataframe(df.style.apply(_style, axis=1), use_container_width=True,
                     hide_index=True, height=config.TABLE_HEIGHT)
    else:
        st.dataframe(df, use_container_width=True, hide_index=True, height=config.TABLE_HEIGHT)


def render_download_controls(
    page: str,
    kind: str,
    formats: Sequence[str] = ("csv", "json", "pdf"),
) -> None:
    """Format picker, "Prepare" button and the resulting download button.

    The download uses the filters the page's rows were loaded with.
    Nothing is requested from the API when the page has no rows.
    """
    col1, col2, col3 = st.columns([1, 1, 2])

    with col1:
        fmt = st.selectbox(
            "Format",
            list(formats),
            format_func=lambda f: FORMAT_LABELS.get(f, f.upper()),
            key=f"{page}_fmt",
            label_visibility="collapsed",
        )

    with col2:
        if st.button("Prepare download", key=f"{page}_prepare", use_container_width=True):
            rows = SessionState.get_rows(page)
            if not rows:
                st.toast("Nothing to download")
                SessionState.set_download(page, None)
            else:
                token = SessionState.get_auth_token()
                with st.spinner("Preparing file..."):
                    result = get_api_client().download_list(
                        token, kind, fmt, **SessionState.get_row_filters(page),
                    )
                if result.success:
                    SessionState.set_download(page, result)
                else:
                    st.error(result.error or "Download failed")
                    SessionState.set_download(page, None)

    prepared = SessionState.get_download(page)
    with col3:
        if prepared is not None:
            st.download_button(
                f"Download {prepared.filename}",
                data=prepared.content,
                file_name=prepared.filename,
                mime=prepared.mime_type,
                key=f"{page}_download",
                use_container_width=True,
            )


def summary_metrics(items: Dict[str, Any]) -> None:
    """One st.metric per entry, side by side."""
    cols = st.columns(len(items))
    for col, (label, value) in zip(cols, items.items()):
        col.metric(label, value)
