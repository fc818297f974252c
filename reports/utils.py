from openpyxl.styles import Font, Alignment, PatternFill
from openpyxl.cell.cell import MergedCell
from openpyxl.utils import get_column_letter

HEADER_FONT = Font(bold=True, name='Calibri', size=12)
HEADER_FILL = PatternFill(start_color='DDEBF7', end_color='DDEBF7', fill_type='solid')
TITLE_FONT = Font(bold=True, name='Calibri', size=14)
CENTER = Alignment(horizontal='center', vertical='center')


def style_header_row(sheet, row_number=1):
    """Bold, shaded and centred cells for a table header row."""
    for cell in sheet[row_number]:
        if cell.value is None:
            continue
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = CENTER


def write_title(sheet, title, subtitle=None, width=2):
    """Title row (merged across `width` columns), optional subtitle, then a spacer."""
    sheet.append([title])
    row = sheet.max_row
    sheet.cell(row=row, column=1).font = TITLE_FONT
    if width > 1:
        sheet.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
    if subtitle:
        sheet.append([subtitle])
    sheet.append([])


def append_table(sheet, headers, rows, heading=None):
    """Append an optional section heading, a styled header row and the data rows."""
    if heading:
        sheet.append([heading])
        sheet.cell(row=sheet.max_row, column=1).font = HEADER_FONT
    sheet.append(list(headers))
    style_header_row(sheet, row_number=sheet.max_row)
    count = 0
    for row in rows:
        sheet.append(list(row))
        count += 1
    if not count:
        sheet.append(['(no data)'])
    sheet.append([])


def adjust_column_widths(sheet, min_width=10, max_width=60):
    """Fit each column to its longest value. Merged cell placeholders are skipped."""
    for col_idx in range(1, sheet.max_column + 1):
        column_letter = get_column_letter(col_idx)
        lengths = [
            len(str(cell.value))
            for cell in sheet[column_letter]
            if cell.value is not None and not isinstance(cell, MergedCell)
        ]
        longest = max(lengths, default=0)
        sheet.column_dimensions[column_letter].width = max(min_width, min(longest + 2, max_width))
