"""
Cost-volume-profit calculations for the break-even planner.

Everything here is a pure function of its inputs: no Streamlit, no session
state. The app calls compute() on every rerun and renders whatever comes back.
"""
import math
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

import numpy as np

from config import (
    SENSITIVITY_LIMIT,
    TABLE_MAX_QUANTITY,
    CHART_MARGIN,
    CHART_TARGET_POINTS,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parameters:
    units: float
    fixed_cost: float
    variable_cost_per_unit: float
    selling_price_per_unit: float
    tax_rate: float = 0.0  # percent, 0-100


@dataclass(frozen=True)
class SensitivityAdjustments:
    """Percentage offsets applied to the base parameters before computing"""
    price_change: float = 0.0
    variable_cost_change: float = 0.0
    fixed_cost_change: float = 0.0
    tax_rate_change: float = 0.0

    @property
    def is_neutral(self) -> bool:
        return not any((
            self.price_change,
            self.variable_cost_change,
            self.fixed_cost_change,
            self.tax_rate_change,
        ))


@dataclass(frozen=True)
class TableRow:
    quantity: float
    fixed_cost: float
    variable_cost: float
    total_cost: float
    revenue: float
    profit_before_tax: float
    net_profit: float


@dataclass(frozen=True)
class ChartPoint:
    quantity: float
    total_cost: float
    total_revenue: float
    fixed_cost: float
    profit_before_tax: float
    net_profit: float


class RejectionKind(Enum):
    INVALID_INPUT = "invalid_input"
    BREAK_EVEN_UNATTAINABLE = "break_even_unattainable"


@dataclass(frozen=True)
class Rejected:
    kind: RejectionKind
    message: str
    field: Optional[str] = None

    def __bool__(self):
        return False


@dataclass(frozen=True)
class CvpResult:
    parameters: Parameters
    fixed_cost_per_unit: float
    total_variable_cost: float
    total_cost: float
    total_cost_per_unit: float
    sales_revenue: float
    profit_before_tax: float
    net_profit: float
    contribution_margin: float
    break_even_units: float
    break_even_revenue: float
    rows: Tuple[TableRow, ...]
    chart: Tuple[ChartPoint, ...]

    @property
    def total_revenue(self) -> float:
        return self.sales_revenue

    @property
    def profit_or_loss(self) -> float:
        return self.profit_before_tax

    @property
    def profit_margin(self) -> float:
        """Profit/loss as a percentage of sales revenue"""
        return self.profit_before_tax / self.sales_revenue * 100

    @property
    def is_profitable(self) -> bool:
        return self.profit_before_tax > 0

    @property
    def is_above_break_even(self) -> bool:
        return self.parameters.units >= self.break_even_units

    @property
    def units_needed(self) -> int:
        return math.ceil(self.break_even_units)

    @property
    def margin_of_safety_units(self) -> float:
        return self.parameters.units - self.break_even_units

    @property
    def margin_of_safety_revenue(self) -> float:
        return self.sales_revenue - self.break_even_revenue


Outcome = Union[CvpResult, Rejected]

UNATTAINABLE_MESSAGE = (
    "Selling price must be greater than the variable cost per unit "
    "to reach break-even."
)

OUT_OF_RANGE_MESSAGE = (
    "The figures are too large or too small to analyse. "
    "Check the inputs and the sensitivity adjustments."
)


def is_rejected(outcome: Outcome) -> bool:
    return isinstance(outcome, Rejected)


def clamp_adjustment(change: float) -> float:
    """Keep a sensitivity offset within the slider range"""
    return max(-SENSITIVITY_LIMIT, min(SENSITIVITY_LIMIT, float(change)))


def apply_sensitivity(params: Parameters,
                      adjustments: Optional[SensitivityAdjustments]) -> Parameters:
    """
    Scale each base parameter by (1 + change/100) for its slider.

    Units are never adjusted. Offsets are applied once against the base
    values, so repeated reruns with the same sliders give the same numbers.
    """
    if adjustments is None:
        return params

    def scaled(value, change):
        return value * (1 + clamp_adjustment(change) / 100)

    return replace(
        params,
        selling_price_per_unit=scaled(params.selling_price_per_unit, adjustments.price_change),
        variable_cost_per_unit=scaled(params.variable_cost_per_unit, adjustments.variable_cost_change),
        fixed_cost=scaled(params.fixed_cost, adjustments.fixed_cost_change),
        tax_rate=scaled(params.tax_rate, adjustments.tax_rate_change),
    )


def validate(params: Parameters) -> Optional[Rejected]:
    """
    Check the input preconditions.

    Returns:
        Rejected: describing the first failing field, or None if all is well
    """
    checks = (
        ('units', params.units, lambda v: v > 0, "Units must be greater than zero."),
        ('fixed_cost', params.fixed_cost, lambda v: v >= 0, "Fixed cost cannot be negative."),
        ('variable_cost_per_unit', params.variable_cost_per_unit, lambda v: v >= 0,
         "Variable cost per unit cannot be negative."),
        ('selling_price_per_unit', params.selling_price_per_unit, lambda v: v > 0,
         "Selling price per unit must be greater than zero."),
        ('tax_rate', params.tax_rate, lambda v: 0 <= v <= 100,
         "Tax rate must be between 0 and 100 percent."),
    )
    for name, value, is_valid, message in checks:
        if not math.isfinite(value) or not is_valid(value):
            return Rejected(RejectionKind.INVALID_INPUT, message, field=name)
    return None


def evaluate_at(params: Parameters, quantity: float) -> dict:
    """Cost, revenue and profit figures at a given quantity"""
    variable_cost = quantity * params.variable_cost_per_unit
    total_cost = params.fixed_cost + variable_cost
    revenue = quantity * params.selling_price_per_unit
    profit_before_tax = revenue - total_cost
    net_profit = profit_before_tax * (1 - params.tax_rate / 100)
    return {
        'quantity': quantity,
        'fixed_cost': params.fixed_cost,
        'variable_cost': variable_cost,
        'total_cost': total_cost,
        'revenue': revenue,
        'profit_before_tax': profit_before_tax,
        'net_profit': net_profit,
    }


def build_table(params: Parameters) -> Tuple[TableRow, ...]:
    """
    Schedule rows for quantities 1..10 (capped at the target units), plus
    one row for the target itself when it is above 10. The target row is
    appended after the block, not sorted into it.
    """
    units = params.units
    last = min(TABLE_MAX_QUANTITY, math.floor(units))
    rows = [TableRow(**evaluate_at(params, float(q))) for q in range(1, last + 1)]
    if units > TABLE_MAX_QUANTITY:
        rows.append(TableRow(**evaluate_at(params, units)))
    return tuple(rows)


def _chart_point(params: Parameters, quantity: float) -> ChartPoint:
    figures = evaluate_at(params, quantity)
    return ChartPoint(
        quantity=figures['quantity'],
        total_cost=figures['total_cost'],
        total_revenue=figures['revenue'],
        fixed_cost=figures['fixed_cost'],
        profit_before_tax=figures['profit_before_tax'],
        net_profit=figures['net_profit'],
    )


def build_chart_series(params: Parameters, break_even_units: float) -> Tuple[ChartPoint, ...]:
    """
    Evenly spaced points from 0 to 20% past the larger of the target and
    break-even units, roughly 20 of them.

    The break-even and target quantities are added when no grid point lies
    within half a step of them, then everything is sorted by quantity.
    """
    chart_range = math.ceil(max(params.units, break_even_units) * CHART_MARGIN)
    step = max(1, chart_range // CHART_TARGET_POINTS)

    points = [_chart_point(params, float(q)) for q in np.arange(0, chart_range + 1, step)]

    for forced in (break_even_units, params.units):
        if not any(abs(p.quantity - forced) < step / 2 for p in points):
            points.append(_chart_point(params, forced))

    points.sort(key=lambda p: p.quantity)
    return tuple(points)


def compute(params: Parameters,
            adjustments: Optional[SensitivityAdjustments] = None) -> Outcome:
    """
    Run the full break-even analysis.

    Args:
        params (Parameters): Base inputs from the form
        adjustments (SensitivityAdjustments): Optional slider offsets

    Returns:
        CvpResult with headline figures, schedule rows and chart points, or
        Rejected when the inputs are invalid or break-even cannot be reached
    """
    rejection = validate(params)
    if rejection is not None:
        logger.info("Rejected parameters (%s): %s", rejection.field, rejection.message)
        return rejection

    adjusted = apply_sensitivity(params, adjustments)

    contribution_margin = adjusted.selling_price_per_unit - adjusted.variable_cost_per_unit
    if not contribution_margin > 0:
        logger.info("Break-even unattainable, contribution margin %.4f", contribution_margin)
        return Rejected(RejectionKind.BREAK_EVEN_UNATTAINABLE, UNATTAINABLE_MESSAGE)

    units = adjusted.units
    total_variable_cost = adjusted.variable_cost_per_unit * units
    total_cost = adjusted.fixed_cost + total_variable_cost
    sales_revenue = adjusted.selling_price_per_unit * units
    profit_before_tax = sales_revenue - total_cost
    net_profit = profit_before_tax * (1 - adjusted.tax_rate / 100)
    break_even_units = adjusted.fixed_cost / contribution_margin
    break_even_revenue = break_even_units * adjusted.selling_price_per_unit

    figures = (
        adjusted.fixed_cost, adjusted.variable_cost_per_unit,
        adjusted.selling_price_per_unit, adjusted.tax_rate,
        adjusted.fixed_cost / units, total_cost, total_cost / units,
        sales_revenue, profit_before_tax, net_profit,
        break_even_units, break_even_revenue,
        max(units, break_even_units) * CHART_MARGIN,
    )
    if not all(math.isfinite(value) for value in figures) or sales_revenue == 0:
        logger.info("Figures out of range for units=%r, contribution margin %r",
                    units, contribution_margin)
        return Rejected(RejectionKind.INVALID_INPUT, OUT_OF_RANGE_MESSAGE)

    result = CvpResult(
        parameters=adjusted,
        fixed_cost_per_unit=adjusted.fixed_cost / units,
        total_variable_cost=total_variable_cost,
        total_cost=total_cost,
        total_cost_per_unit=total_cost / units,
        sales_revenue=sales_revenue,
        profit_before_tax=profit_before_tax,
        net_profit=net_profit,
        contribution_margin=contribution_margin,
        break_even_units=break_even_units,
        break_even_revenue=break_even_revenue,
        rows=build_table(adjusted),
        chart=build_chart_series(adjusted, break_even_units),
    )
    logger.debug("Computed break-even at %.2f units for %.2f target units",
                 break_even_units, units)
    return result
