"""Plotly visualisation helpers for BudgetEase.

Each function accepts an object produced elsewhere in the package and
returns a ``plotly.graph_objects.Figure``. Empty input gives a blank
figure titled "No data to display" so callers never have to special-case
it.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .appointments import AvailableSlotMap


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_budget_progress_chart(table: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Horizontal bar chart of progress per budget.

    Parameters
    ----------
    table : pandas.DataFrame
        Output of :func:`budgetease.budget_progress.budget_progress_table`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        One bar per category, coloured by status, on a 0-100 axis.
    """
    if table.empty:
        return _empty_figure()
    df = table.copy()
    df['Progress (%)'] = pd.to_numeric(df['Progress (%)'], errors='coerce').fillna(0.0)
    df['Label'] = np.where(
        df['Status'] == 'Unavailable',
        'n/a',
        df['Progress (%)'].map(lambda v: f"{v:.1f}%"),
    )
    fig = px.bar(
        df,
        x='Progress (%)',
        y='Category',
        color='Status',
        orientation='h',
        text='Label',
        hover_data=['Savings Goal', 'Current Saved', 'Remaining', 'Monthly Required'],
    )
    fig.update_layout(
        title=title or "Savings progress by budget",
        xaxis_title="Progress (%)",
        yaxis_title="Budget",
        xaxis_range=[0, 100],
    )
    return fig


def create_slot_overview_chart(slots: AvailableSlotMap, title: str | None = None) -> go.Figure:
    """Stacked bar chart of offered morning and afternoon slots per day.

    Parameters
    ----------
    slots : dict
        Output of :func:`budgetease.appointments.generate_available_slots`.
    title : str, optional
        Chart title.
    """
    if not slots:
        return _empty_figure()
    rows = [
        {'Day': f"{day.day_name} {key}", 'Type': slot.type}
        for key, day in slots.items()
        for slot in day.slots
    ]
    if not rows:
        return _empty_figure()
    counts = pd.DataFrame(rows).groupby(['Day', 'Type']).size().reset_index(name='Slots')
    fig = px.bar(counts, x='Day', y='Slots', color='Type', barmode='stack')
    fig.update_layout(
        title=title or "Available appointment slots",
        xaxis_title="Day",
        yaxis_title="Slots",
    )
    return fig
