import math
import re

from config import CURRENCY_SYMBOL, MAX_INPUT_LENGTH

# Leading numeric prefix, the same part a browser number parse would accept
_NUMBER_PREFIX = re.compile(r'^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?')


def format_currency(amount, symbol=CURRENCY_SYMBOL):
    """
    Format a number as currency, e.g. $1,234.50 or -$1,234.50
    """
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_large_number(value):
    """Compact axis labels: 1.5K, 2.3M, 4.0B"""
    magnitude = abs(value)
    if magnitude >= 1e9:
        return f"{value / 1e9:.1f}B"
    if magnitude >= 1e6:
        return f"{value / 1e6:.1f}M"
    if magnitude >= 1e3:
        return f"{value / 1e3:.1f}K"
    return f"{value:.0f}"


def format_number(value, max_decimals=2):
    """
    Group thousands and drop trailing zeros

    Args:
        value (float): Number to format
        max_decimals (int): Maximum number of decimal places kept

    Returns:
        str: e.g. 3,333.33 or 1,000
    """
    text = f"{value:,.{max_decimals}f}"
    if max_decimals > 0:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def format_percent(value, decimals=1):
    return f"{value:.{decimals}f}%"


def format_signed_percent(value):
    """Slider label, e.g. +20%, -5%, 0%"""
    prefix = "+" if value > 0 else ""
    return f"{prefix}{value:g}%"


def parse_number(text, default=0.0, max_length=MAX_INPUT_LENGTH):
    """
    Parse a number typed into a form field.

    The text is cut to max_length characters, then its leading numeric part
    is read ("12abc" gives 12). Anything that does not start with a number,
    or does not give a finite value, falls back to the default.
    """
    if text is None:
        return default
    if isinstance(text, (int, float)):
        value = float(text)
        return value if math.isfinite(value) else default

    text = str(text)[:max_length]
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return default
    try:
        value = float(match.group(0))
    except (ValueError, OverflowError):
        return default
    return value if math.isfinite(value) else default
