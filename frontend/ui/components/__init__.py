"""Reusable UI components for the portal."""
from frontend.ui.components.charts import (
    create_session_bar_chart,
    create_daily_amount_chart,
)
from frontend.ui.components.sidebar import (
    render_sidebar,
    render_admin_section,
    render_backend_status,
)
from frontend.ui.components.tables import (
    load_rows,
    rows_to_frame,
    render_rows_table,
    render_download_controls,
    summary_metrics,
)

__all__ = [
    # Charts
    "create_session_bar_chart",
    "create_daily_amount_chart",
    # Sidebar
    "render_sidebar",
    "render_admin_section",
    "render_backend_status",
    # Tables and downloads
    "load_rows",
    "rows_to_frame",
    "render_rows_table",
    "render_download_controls",
    "summary_metrics",
]
