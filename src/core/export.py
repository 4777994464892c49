"""CSV export utilities."""
import csv

from django.http import HttpResponse


def rows_to_csv_response(rows, columns, filename):
    """Convert an iterable of mappings or objects to a CSV HttpResponse.

    Args:
        rows: iterable of dicts or model instances
        columns: list of (key_or_callable, header_label) tuples.
            If key_or_callable is a string, the dict key (or attribute) is used.
            If it's callable, it's called with the row.
        filename: download filename (without extension)
    """
    response = HttpResponse(content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = f'attachment; filename="{filename}.csv"'
    # UTF-8 BOM for Excel compatibility
    response.write("\ufeff")

    writer = csv.writer(response)
    writer.writerow([col[1] for col in columns])

    for row in rows:
        values = []
        for field, _ in columns:
            if callable(field):
                val = field(row)
            elif isinstance(row, dict):
                val = row.get(field, "")
            else:
                val = getattr(row, field, "")
            values.append(str(val) if val is not None else "")
        writer.writerow(values)

    return response
