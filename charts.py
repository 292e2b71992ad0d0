import numpy as np
import plotly.graph_objects as go

from calculator import CvpResult
from config import CURRENCY_SYMBOL
from utils import format_currency, format_large_number


def currency_ticks(values, count=6):
    """Evenly spaced y-axis ticks labelled like $1.5K / $2.0M"""
    low = min(min(values), 0.0)
    high = max(max(values), 0.0)
    if high == low:
        high = low + 1.0
    tickvals = [float(v) for v in np.linspace(low, high, count)]
    ticktext = [
        f"{'-' if v < 0 else ''}{CURRENCY_SYMBOL}{format_large_number(abs(v))}"
        for v in tickvals
    ]
    return tickvals, ticktext


def build_break_even_figure(result: CvpResult, target_units=None) -> go.Figure:
    """
    Line chart of total cost, fixed cost, revenue and net profit against
    quantity, with markers for the target units and the break-even point
    """
    if target_units is None:
        target_units = result.parameters.units

    quantities = [p.quantity for p in result.chart]

    fig = go.Figure()

    # Total cost line
    fig.add_trace(go.Scatter(
        x=quantities,
        y=[p.total_cost for p in result.chart],
        mode='lines',
        name='Total Cost',
        line=dict(color='rgba(220, 38, 38, 0.9)', width=3)
    ))

    # Fixed cost line
    fig.add_trace(go.Scatter(
        x=quantities,
        y=[p.fixed_cost for p in result.chart],
        mode='lines',
        name='Fixed Cost',
        line=dict(color='rgba(245, 158, 11, 0.9)', width=2, dash='dash')
    ))

    # Revenue line
    fig.add_trace(go.Scatter(
        x=quantities,
        y=[p.total_revenue for p in result.chart],
        mode='lines',
        name='Total Revenue',
        line=dict(color='rgba(22, 163, 74, 0.9)', width=3)
    ))

    # Net profit line
    fig.add_trace(go.Scatter(
        x=quantities,
        y=[p.net_profit for p in result.chart],
        mode='lines',
        name='Net Profit',
        line=dict(color='rgba(37, 99, 235, 0.6)', width=1, dash='dot'),
        hovertemplate='%{y:,.2f}<extra>Net Profit</extra>'
    ))

    # Break-even marker
    fig.add_trace(go.Scatter(
        x=[result.break_even_units],
        y=[result.break_even_revenue],
        mode='markers',
        name='Break-even Point',
        marker=dict(color='purple', size=10),
        hovertemplate=(
            f"Break-even: {result.units_needed} units<br>"
            f"{format_currency(result.break_even_revenue)}<extra></extra>"
        )
    ))

    fig.add_vline(
        x=target_units,
        line=dict(color='rgba(99, 102, 241, 0.9)', width=2, dash='dash'),
        annotation_text=f"Target: {target_units:g} units",
        annotation_position='top'
    )
    fig.add_vline(
        x=result.break_even_units,
        line=dict(color='purple', width=1, dash='dot'),
        annotation_text=f"Break-even: {result.units_needed} units",
        annotation_position='bottom right'
    )
    fig.add_hline(
        y=result.break_even_revenue,
        line=dict(color='purple', width=1, dash='dot')
    )

    tickvals, ticktext = currency_ticks(
        [p.total_cost for p in result.chart]
        + [p.total_revenue for p in result.chart]
        + [p.net_profit for p in result.chart]
    )

    fig.update_layout(
        title="Break-even Chart: Costs vs. Revenue",
        xaxis_title="Quantity (units)",
        yaxis=dict(
            title=f"Amount ({CURRENCY_SYMBOL})",
            tickvals=tickvals,
            ticktext=ticktext
        ),
        legend=dict(
            orientation="h",
            yanchor="bottom",
            y=1.02,
            xanchor="right",
            x=1
        ),
        hovermode='x unified',
        height=500
    )

    return fig
