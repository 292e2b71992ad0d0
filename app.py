import streamlit as st
import pandas as pd
import logging
from datetime import datetime

from config import (
    PAGE_TITLE,
    MAX_INPUT_LENGTH,
    SENSITIVITY_LIMIT,
    SENSITIVITY_STEP,
    BASIC_DEFAULTS,
    DASHBOARD_DEFAULTS,
    SENSITIVITY_DEFAULTS,
    configure_logging,
)
from calculator import (
    Parameters,
    SensitivityAdjustments,
    RejectionKind,
    apply_sensitivity,
    compute,
)
from charts import build_break_even_figure
from report import table_frame, generate_excel_report
from utils import (
    format_currency,
    format_number,
    format_percent,
    format_signed_percent,
    parse_number,
)

# Page configuration
st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon="📈",
    layout="wide"
)

configure_logging()
logger = logging.getLogger(__name__)

# (field, label, help text)
BASIC_FIELDS = [
    ('units', "Units to Produce",
     "Number of units you plan to produce and sell"),
    ('fixed_cost', "Total Fixed Cost ($)",
     "Costs that do not change with production volume (rent, fixed salaries, insurance, etc.)"),
    ('variable_cost_per_unit', "Variable Cost per Unit ($)",
     "Cost that varies directly with each unit produced (materials, direct labour, etc.)"),
    ('selling_price_per_unit', "Selling Price per Unit ($)",
     "Price at which you sell each unit of your product"),
]

DASHBOARD_FIELDS = [
    ('units', "Units (Quantity)", None),
    ('fixed_cost', "Total Fixed Cost", None),
    ('variable_cost_per_unit', "Variable Cost per Unit", None),
    ('selling_price_per_unit', "Selling Price per Unit", None),
    ('tax_rate', "Tax Rate (%)", "Applied to profit before tax"),
]

SENSITIVITY_SLIDERS = [
    ('price_change', "Change in Selling Price (%)"),
    ('variable_cost_change', "Change in Variable Costs (%)"),
    ('fixed_cost_change', "Change in Fixed Costs (%)"),
    ('tax_rate_change', "Change in Tax Rate (%)"),
]


def input_key(prefix, name):
    return f"{prefix}_{name}"


def set_input_defaults(prefix, defaults, overwrite=False):
    """Seed the text inputs for a form with their default values"""
    for name, value in defaults.items():
        key = input_key(prefix, name)
        if overwrite or key not in st.session_state:
            st.session_state[key] = f"{value:g}"


def set_slider_defaults(overwrite=False):
    for name, value in SENSITIVITY_DEFAULTS.items():
        key = input_key('sensitivity', name)
        if overwrite or key not in st.session_state:
            st.session_state[key] = value


def reset_dashboard():
    """Restore the dashboard inputs and sliders to their defaults"""
    set_input_defaults('dashboard', DASHBOARD_DEFAULTS, overwrite=True)
    set_slider_defaults(overwrite=True)
    logger.info("Dashboard reset to defaults")


def read_parameters(prefix, defaults):
    values = {
        name: parse_number(st.session_state.get(input_key(prefix, name)))
        for name in defaults
    }
    return Parameters(**values)


def read_adjustments():
    return SensitivityAdjustments(**{
        name: st.session_state.get(input_key('sensitivity', name), 0)
        for name in SENSITIVITY_DEFAULTS
    })


def render_inputs(prefix, fields):
    for name, label, help_text in fields:
        st.text_input(
            label,
            key=input_key(prefix, name),
            max_chars=MAX_INPUT_LENGTH,
            help=help_text
        )


def show_rejection(outcome):
    """Distinct messages for bad data and for an unreachable break-even"""
    if outcome.kind is RejectionKind.BREAK_EVEN_UNATTAINABLE:
        st.error(f"**Break-even Unattainable**\n\n{outcome.message}")
    else:
        st.warning(f"**Invalid data**\n\n{outcome.message}")


def formatted_schedule(rows):
    """Schedule table with currency columns formatted for display"""
    df = table_frame(rows)
    for column in df.columns:
        if column == 'Quantity':
            df[column] = df[column].map(format_number)
        else:
            df[column] = df[column].map(format_currency)
    return df


# Initialize session state variables if they don't exist
set_input_defaults('basic', BASIC_DEFAULTS)
set_input_defaults('dashboard', DASHBOARD_DEFAULTS)
set_slider_defaults()

# Calculate values to use throughout the app
basic_params = read_parameters('basic', BASIC_DEFAULTS)
basic_outcome = compute(basic_params)

dashboard_params = read_parameters('dashboard', DASHBOARD_DEFAULTS)
adjustments = read_adjustments()
dashboard_outcome = compute(dashboard_params, adjustments)

# Header with export button on the right
header_col1, header_col2 = st.columns([5, 1])

with header_col1:
    st.title(PAGE_TITLE)
    st.caption("Cost-volume-profit analysis with a detailed schedule and an interactive break-even chart")

with header_col2:
    st.write("")
    if dashboard_outcome:
        excel_file = generate_excel_report(dashboard_outcome, dashboard_params, adjustments)
        st.download_button(
            label="📊 Export to Excel",
            data=excel_file,
            file_name=f"break_even_analysis_{datetime.now().strftime('%Y-%m-%d')}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
    else:
        st.button("📊 Export to Excel", disabled=True, help="Enter valid data to export")

# Sidebar mirrors the dashboard headline numbers
with st.sidebar:
    st.markdown("### Current Break-even Position")
    if dashboard_outcome:
        st.metric("Break-even Units", f"{dashboard_outcome.units_needed:,}")
        st.metric("Break-even Revenue", format_currency(dashboard_outcome.break_even_revenue))
        st.metric("Total Revenue", format_currency(dashboard_outcome.total_revenue))
        st.metric("Net Profit", format_currency(dashboard_outcome.net_profit))
    else:
        st.info("Enter valid data to see results")

st.markdown("---")

basic_tab, dashboard_tab = st.tabs(["Break-even Calculator", "Analysis Dashboard"])

with basic_tab:
    input_col, results_col = st.columns(2)

    with input_col:
        st.subheader("Analysis Parameters")
        render_inputs('basic', BASIC_FIELDS)

        if not basic_outcome:
            show_rejection(basic_outcome)

    with results_col:
        st.subheader("Analysis Results")

        if basic_outcome:
            result = basic_outcome
            summary_cols = st.columns(2)
            with summary_cols[0]:
                st.metric("Revenue", format_currency(result.sales_revenue))
            with summary_cols[1]:
                label = "Profit" if result.is_profitable else "Loss"
                st.metric(label, format_currency(abs(result.profit_or_loss)))

            st.markdown("#### Detailed Analysis")
            details = pd.DataFrame([
                {'Item': "Fixed Cost per Unit",
                 'Value': format_currency(result.fixed_cost_per_unit),
                 'Description': "Fixed cost spread over each unit"},
                {'Item': "Total Variable Cost",
                 'Value': format_currency(result.total_variable_cost),
                 'Description': f"{format_number(basic_params.units)} units × "
                                f"{format_currency(basic_params.variable_cost_per_unit)}"},
                {'Item': "Total Cost",
                 'Value': format_currency(result.total_cost),
                 'Description': "Fixed + variable costs"},
                {'Item': "Total Cost per Unit",
                 'Value': format_currency(result.total_cost_per_unit),
                 'Description': "Total cost ÷ units produced"},
                {'Item': "Profit Margin",
                 'Value': format_percent(result.profit_margin),
                 'Description': "Profit as % of revenue"},
            ])
            st.dataframe(details, use_container_width=True, hide_index=True)

            st.markdown("#### Break-even Point")
            be_cols = st.columns(2)
            with be_cols[0]:
                st.metric("Units", format_number(result.break_even_units))
            with be_cols[1]:
                st.metric("Revenue", format_currency(result.break_even_revenue))

            st.markdown(
                f"You need to sell **{format_number(result.break_even_units)}** units "
                f"to cover all your costs and reach break-even."
            )

            if result.is_above_break_even:
                st.success("✓ Above the break-even point")
            else:
                st.warning("⚠ Below the break-even point")
        else:
            st.info("Enter valid data to see the results")

with dashboard_tab:
    form_col, sensitivity_col = st.columns(2)

    with form_col:
        st.subheader("Enter Your Data")
        st.caption("Fill in the fields for the analysis")
        render_inputs('dashboard', DASHBOARD_FIELDS)

    with sensitivity_col:
        st.subheader("Sensitivity Analysis")
        st.caption("Adjust the parameters to see the impact in real time")

        for name, label in SENSITIVITY_SLIDERS:
            key = input_key('sensitivity', name)
            st.slider(
                label,
                min_value=-SENSITIVITY_LIMIT,
                max_value=SENSITIVITY_LIMIT,
                step=SENSITIVITY_STEP,
                key=key
            )

        st.button("Reset Adjustments", on_click=reset_dashboard, use_container_width=True)

        # Adjusted values, shown even when break-even cannot be reached
        adjusted = apply_sensitivity(dashboard_params, adjustments)

        st.markdown("##### Adjusted Values")
        adjusted_df = pd.DataFrame([
            {'Parameter': "Selling Price", 'Change': format_signed_percent(adjustments.price_change),
             'Value': format_currency(adjusted.selling_price_per_unit)},
            {'Parameter': "Variable Cost per Unit", 'Change': format_signed_percent(adjustments.variable_cost_change),
             'Value': format_currency(adjusted.variable_cost_per_unit)},
            {'Parameter': "Total Fixed Cost", 'Change': format_signed_percent(adjustments.fixed_cost_change),
             'Value': format_currency(adjusted.fixed_cost)},
            {'Parameter': "Tax Rate", 'Change': format_signed_percent(adjustments.tax_rate_change),
             'Value': format_percent(adjusted.tax_rate)},
        ])
        st.dataframe(adjusted_df, use_container_width=True, hide_index=True)

    st.markdown("---")

    if dashboard_outcome:
        result = dashboard_outcome

        metric_cols = st.columns(6)
        with metric_cols[0]:
            st.metric("Break-even (Units)", f"{result.units_needed:,}")
        with metric_cols[1]:
            st.metric("Break-even ($)", format_currency(result.break_even_revenue))
        with metric_cols[2]:
            st.metric("Total Revenue", format_currency(result.total_revenue))
        with metric_cols[3]:
            st.metric("Total Cost", format_currency(result.total_cost))
        with metric_cols[4]:
            st.metric("Profit Before Tax", format_currency(result.profit_before_tax))
        with metric_cols[5]:
            label = "Net Profit" if result.net_profit >= 0 else "Net Loss"
            st.metric(label, format_currency(abs(result.net_profit)))

        st.subheader("Detailed Table")
        st.dataframe(formatted_schedule(result.rows), use_container_width=True, hide_index=True)

        st.subheader("Break-even Chart")
        fig = build_break_even_figure(result, target_units=dashboard_params.units)
        st.plotly_chart(fig, use_container_width=True)
        st.caption("Total cost (red), total revenue (green) and fixed cost (orange, dashed) against quantity.")

        # Key insights, as on the profit analysis view
        if result.is_above_break_even:
            st.success(
                f"You are operating with a safety margin of "
                f"{format_number(result.margin_of_safety_units)} units "
                f"({format_currency(result.margin_of_safety_revenue)}) above break-even."
            )
        else:
            st.warning(
                f"You need to sell {format_number(-result.margin_of_safety_units)} more units "
                f"({format_currency(-result.margin_of_safety_revenue)} in sales) to break even."
            )
    else:
        show_rejection(dashboard_outcome)
