"""Plotly charts for the admin panel.

All functions take the row dicts returned by the API and return a
Plotly Figure, or None when there is nothing to plot.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from frontend.config.settings import config

logger = logging.getLogger(__name__)


def create_session_bar_chart(
    rows: List[Dict[str, Any]],
    title: Optional[str] = None,
    session_order: Sequence[str] = (),
) -> Optional[go.Figure]:
    """Bookings (sum of qty) per session label, in slot order.

    Args:
        rows: Annadanam rows with session, qty and completed
        title: Chart title
        session_order: Labels in slot order; unknown labels sort after them

    Returns:
        Plotly Figure or None for no rows
    """
    if not rows:
        return None

    df = pd.DataFrame(rows)
    if 'session' not in df.columns:
        return None
    if 'qty' in df.columns:
        df['qty'] = pd.to_numeric(df['qty'], errors='coerce').fillna(1)
    else:
        df['qty'] = 1
    df['state'] = 'Upcoming'
    if 'completed' in df.columns:
        df.loc[df['completed'].fillna(False).astype(bool), 'state'] = 'Completed'

    grouped = df.groupby(['session', 'state'], as_index=False)['qty'].sum()
    order = [s for s in session_order if s in set(grouped['session'])]
    order += sorted(set(grouped['session']) - set(order))

    fig = px.bar(
        grouped,
        x='session',
        y='qty',
        color='state',
        category_orders={'session': order, 'state': ['Upcoming', 'Completed']},
        title=title or "Devotees per session",
        template="plotly_white",
        color_discrete_map={'Upcoming': '#E8731A', 'Completed': '#9E9E9E'},
    )
    fig.update_layout(
        xaxis_title="Session",
        yaxis_title="Devotees",
        height=config.DEFAULT_CHART_HEIGHT,
        legend_title_text="",
    )
    return fig


def create_daily_amount_chart(rows: List[Dict[str, Any]], title: Optional[str] = None) -> Optional[go.Figure]:
    """Donation total per day.

    Args:
        rows: Donation rows with created_at and amount
        title: Chart title

    Returns:
        Plotly Figure or None when no row has a usable amount
    """
    if not rows:
        return None

    df = pd.DataFrame(rows)
    if 'created_at' not in df.columns or 'amount' not in df.columns:
        return None
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce')
    df['day'] = pd.to_datetime(df['created_at'], errors='coerce', utc=True).dt.date
    df = df.dropna(subset=['amount', 'day'])
    if df.empty:
        return None

    daily = df.groupby('day', as_index=False)['amount'].sum()
    fig = px.bar(
        daily,
        x='day',
        y='amount',
        title=title or "Donations per day",
        template="plotly_white",
    )
    fig.update_layout(
        xaxis_title="Date",
        yaxis_title="Amount (₹)",
        height=config.DEFAULT_CHART_HEIGHT,
    )
    return fig
