"""Attendance report exports (CSV / Excel) built with pandas."""
from __future__ import annotations

import io
from typing import Iterable, Mapping

import pandas as pd

from classroom.errors import ValidationError

CSV_MEDIA_TYPE = "text/csv"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def summary_frame(rows: Iterable) -> pd.DataFrame:
    """One line per student: present / total / percentage."""
    data = [
        {
            "Enrollment Number": row.student_id,
            "Student Name": row.name or "Unknown",
            "Present": row.present,
            "Total": row.total,
            "Attendance %": row.percentage if row.has_data else "No data",
        }
        for row in rows
    ]
    return pd.DataFrame(
        data,
        columns=["Enrollment Number", "Student Name", "Present", "Total", "Attendance %"],
    )


def daily_log_frame(records: Iterable, names: Mapping[str, str]) -> pd.DataFrame:
    """One line per stored mark, sorted by date then enrollment number."""
    data = []
    for record in records:
        for student_id, present in sorted(record.records.items()):
            data.append(
                {
                    "Date": record.date.isoformat(),
                    "Enrollment Number": student_id,
                    "Student Name": names.get(student_id, "Unknown"),
                    "Status": "Present" if present else "Absent",
                }
            )
    frame = pd.DataFrame(data, columns=["Date", "Enrollment Number", "Student Name", "Status"])
    return frame.sort_values(["Date", "Enrollment Number"], kind="stable").reset_index(drop=True)


def render(frame: pd.DataFrame, fmt: str, sheet_name: str = "Attendance") -> tuple[bytes, str, str]:
    """Return (content, media type, file extension)."""
    if fmt == "csv":
        stream = io.StringIO()
        frame.to_csv(stream, index=False)
        return stream.getvalue().encode("utf-8"), CSV_MEDIA_TYPE, "csv"
    if fmt == "excel":
        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            frame.to_excel(writer, index=False, sheet_name=sheet_name)
        return output.getvalue(), EXCEL_MEDIA_TYPE, "xlsx"
    raise ValidationError(f"Unsupported report format: {fmt}")
