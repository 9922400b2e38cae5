"""CSV rendering for report payloads."""

import csv
import io

from fastapi import Response
from pydantic import BaseModel


def report_csv(report: BaseModel, *, name: str, period: str) -> Response:
    """One ``metric,value`` row per report field."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["metric", "value"])
    writer.writerow(["period", period])
    for field, value in report.model_dump().items():
        writer.writerow([field, value])
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{name}-{period}.csv"'},
    )
