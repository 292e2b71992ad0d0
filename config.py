import os
import logging

# Page setup
PAGE_TITLE = os.getenv('CVP_PAGE_TITLE', 'Break-even Profit Planner')

# Display currency (formatting only, no conversion)
CURRENCY_SYMBOL = os.getenv('CVP_CURRENCY_SYMBOL', '$')

# Logging level name, e.g. DEBUG / INFO / WARNING
LOG_LEVEL_NAME = os.getenv('CVP_LOG_LEVEL', 'INFO').upper()

# Text inputs are cut to this many characters before parsing
MAX_INPUT_LENGTH = 12

# Sensitivity sliders run from -50% to +50% in steps of 1
SENSITIVITY_LIMIT = 50
SENSITIVITY_STEP = 1

# Schedule table always covers quantities 1..10 (plus the target if larger)
TABLE_MAX_QUANTITY = 10

# Chart extends 20% past the larger of target units and break-even units,
# sampled at roughly 20 points
CHART_MARGIN = 1.2
CHART_TARGET_POINTS = 20

# Defaults for the basic break-even calculator tab
BASIC_DEFAULTS = {
    'units': 1000.0,
    'fixed_cost': 50000.0,
    'variable_cost_per_unit': 20.0,
    'selling_price_per_unit': 35.0,
}

# Defaults for the extended analysis dashboard tab
DASHBOARD_DEFAULTS = {
    'units': 100.0,
    'fixed_cost': 10000.0,
    'variable_cost_per_unit': 15.0,
    'selling_price_per_unit': 25.0,
    'tax_rate': 30.0,
}

SENSITIVITY_DEFAULTS = {
    'price_change': 0,
    'variable_cost_change': 0,
    'fixed_cost_change': 0,
    'tax_rate_change': 0,
}


def get_log_level():
    """
    Resolve CVP_LOG_LEVEL to a logging level number
    """
    level = logging.getLevelName(LOG_LEVEL_NAME)
    if not isinstance(level, int):
        raise ValueError(f"Invalid CVP_LOG_LEVEL: {LOG_LEVEL_NAME}")
    return level


def configure_logging():
    """Set up root logging for the Streamlit entry point"""
    logging.basicConfig(
        level=get_log_level(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
