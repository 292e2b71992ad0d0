import io
import logging
from dataclasses import asdict
from datetime import datetime

import pandas as pd
import xlsxwriter

from calculator import CvpResult, Parameters, SensitivityAdjustments
from config import CURRENCY_SYMBOL, PAGE_TITLE

logger = logging.getLogger(__name__)

TABLE_COLUMNS = {
    'quantity': 'Quantity',
    'fixed_cost': 'Fixed Cost',
    'variable_cost': 'Variable Cost',
    'total_cost': 'Total Cost',
    'revenue': 'Revenue',
    'profit_before_tax': 'Profit Before Tax',
    'net_profit': 'Net Profit',
}

CHART_COLUMNS = {
    'quantity': 'Quantity',
    'total_cost': 'Total Cost',
    'total_revenue': 'Total Revenue',
    'fixed_cost': 'Fixed Cost',
    'profit_before_tax': 'Profit Before Tax',
    'net_profit': 'Net Profit',
}


def table_frame(rows):
    """Schedule rows as a DataFrame with display column names"""
    df = pd.DataFrame([asdict(row) for row in rows], columns=list(TABLE_COLUMNS))
    return df.rename(columns=TABLE_COLUMNS)


def chart_frame(points):
    """Chart series as a DataFrame with display column names"""
    df = pd.DataFrame([asdict(point) for point in points], columns=list(CHART_COLUMNS))
    return df.rename(columns=CHART_COLUMNS)


def results_summary(result: CvpResult):
    """
    Headline figures in display order

    Returns:
        list: (label, value, kind) where kind is 'currency', 'number' or 'percent'
    """
    net_label = 'Net Profit' if result.net_profit >= 0 else 'Net Loss'
    return [
        ('Break-even Units', result.break_even_units, 'number'),
        ('Units Needed (rounded up)', result.units_needed, 'number'),
        ('Break-even Revenue', result.break_even_revenue, 'currency'),
        ('Total Revenue', result.sales_revenue, 'currency'),
        ('Total Variable Cost', result.total_variable_cost, 'currency'),
        ('Total Cost', result.total_cost, 'currency'),
        ('Fixed Cost per Unit', result.fixed_cost_per_unit, 'currency'),
        ('Total Cost per Unit', result.total_cost_per_unit, 'currency'),
        ('Contribution Margin per Unit', result.contribution_margin, 'currency'),
        ('Profit Before Tax', result.profit_before_tax, 'currency'),
        (net_label, result.net_profit, 'currency'),
        ('Profit Margin', result.profit_margin / 100, 'percent'),
        ('Margin of Safety (units)', result.margin_of_safety_units, 'number'),
    ]


def _parameter_lines(params: Parameters):
    return [
        ('Units', params.units, 'number'),
        ('Fixed Cost', params.fixed_cost, 'currency'),
        ('Variable Cost per Unit', params.variable_cost_per_unit, 'currency'),
        ('Selling Price per Unit', params.selling_price_per_unit, 'currency'),
        ('Tax Rate', params.tax_rate / 100, 'percent'),
    ]


def generate_excel_report(result: CvpResult, base_params: Parameters,
                          adjustments: SensitivityAdjustments = None):
    """
    Build the Excel workbook offered by the export button.

    Sheets: Summary (inputs, adjusted values, results), Schedule (table rows)
    and Chart Data (chart points with a native line chart).
    """
    # Create an in-memory output file
    output = io.BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True})

    # Add formatting
    title_format = workbook.add_format({'bold': True, 'font_size': 14, 'align': 'center', 'bg_color': '#D9EAD3'})
    header_format = workbook.add_format({'bold': True, 'font_size': 12, 'align': 'center', 'bg_color': '#E6F2FF'})
    currency_format = workbook.add_format({'num_format': f'"{CURRENCY_SYMBOL}"#,##0.00'})
    number_format = workbook.add_format({'num_format': '#,##0.00'})
    percent_format = workbook.add_format({'num_format': '0.0%'})
    bold_format = workbook.add_format({'bold': True})
    formats = {'currency': currency_format, 'number': number_format, 'percent': percent_format}

    # Summary Sheet
    summary_sheet = workbook.add_worksheet('Summary')
    summary_sheet.set_column('A:A', 32)
    summary_sheet.set_column('B:C', 18)

    summary_sheet.merge_range(0, 0, 0, 2, f'{PAGE_TITLE} Summary', title_format)
    summary_sheet.write('A2', f'Generated on: {datetime.now().strftime("%d %B %Y")}')

    summary_sheet.write('A4', 'INPUTS', header_format)
    summary_sheet.write('B4', 'Base', header_format)
    summary_sheet.write('C4', 'Adjusted', header_format)
    row = 4
    for (label, base_value, kind), (_, adjusted_value, _) in zip(
            _parameter_lines(base_params), _parameter_lines(result.parameters)):
        summary_sheet.write(row, 0, label)
        summary_sheet.write_number(row, 1, base_value, formats[kind])
        summary_sheet.write_number(row, 2, adjusted_value, formats[kind])
        row += 1

    if adjustments is not None and not adjustments.is_neutral:
        row += 1
        summary_sheet.write(row, 0, 'SENSITIVITY ADJUSTMENTS', header_format)
        row += 1
        for label, change in (
                ('Selling Price Change', adjustments.price_change),
                ('Variable Cost Change', adjustments.variable_cost_change),
                ('Fixed Cost Change', adjustments.fixed_cost_change),
                ('Tax Rate Change', adjustments.tax_rate_change)):
            summary_sheet.write(row, 0, label)
            summary_sheet.write_number(row, 1, change / 100, percent_format)
            row += 1

    row += 1
    summary_sheet.write(row, 0, 'RESULTS', bold_format)
    row += 1
    for label, value, kind in results_summary(result):
        summary_sheet.write(row, 0, label)
        summary_sheet.write_number(row, 1, value, formats[kind])
        row += 1

    row += 1
    status = 'Above break-even' if result.is_above_break_even else 'Below break-even'
    summary_sheet.write(row, 0, 'Status:')
    summary_sheet.write(row, 1, status, bold_format)

    # Schedule Sheet
    schedule_sheet = workbook.add_worksheet('Schedule')
    schedule_sheet.set_column('A:A', 12)
    schedule_sheet.set_column('B:G', 18)
    _write_frame(schedule_sheet, table_frame(result.rows), header_format, number_format, currency_format)

    # Chart Data Sheet
    chart_sheet = workbook.add_worksheet('Chart Data')
    chart_sheet.set_column('A:A', 12)
    chart_sheet.set_column('B:F', 18)
    frame = chart_frame(result.chart)
    _write_frame(chart_sheet, frame, header_format, number_format, currency_format)

    if len(frame):
        last_row = len(frame)
        line_chart = workbook.add_chart({'type': 'scatter', 'subtype': 'straight'})
        for col, name in ((1, 'Total Cost'), (3, 'Fixed Cost'), (2, 'Total Revenue')):
            line_chart.add_series({
                'name': name,
                'categories': ['Chart Data', 1, 0, last_row, 0],
                'values': ['Chart Data', 1, col, last_row, col],
            })
        line_chart.set_title({'name': 'Break-even Chart'})
        line_chart.set_x_axis({'name': 'Quantity (units)'})
        line_chart.set_y_axis({'name': f'Amount ({CURRENCY_SYMBOL})'})
        line_chart.set_size({'width': 720, 'height': 400})
        chart_sheet.insert_chart('H2', line_chart)

    # Close the workbook
    workbook.close()

    # Reset file pointer to beginning
    output.seek(0)

    logger.info("Generated Excel report with %d schedule rows and %d chart points",
                len(result.rows), len(result.chart))
    return output


def _write_frame(sheet, frame, header_format, number_format, currency_format):
    for col, name in enumerate(frame.columns):
        sheet.write(0, col, name, header_format)
    for row_index, values in enumerate(frame.itertuples(index=False), start=1):
        for col, value in enumerate(values):
            cell_format = number_format if col == 0 else currency_format
            sheet.write_number(row_index, col, float(value), cell_format)
