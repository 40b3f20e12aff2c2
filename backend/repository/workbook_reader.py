"""Reads uploaded planning files into a positional cell grid."""

from __future__ import annotations

import io
import zipfile
from pathlib import PurePath

import pandas as pd

from backend.domain.errors import InvalidInputError
from backend.domain.models import GridCell
from backend.utils.logger import get_logger, log_event


logger = get_logger(__name__)


def read_workbook(content: bytes, filename: str) -> list[list[GridCell]]:
    """Return the first sheet of an ``.xlsx`` (or ``;``-separated ``.csv``) as rows.

    No header inference happens here; blank cells come back as ``None`` and
    trailing blank cells are trimmed so short rows stay short.
    """

    suffix = PurePath(filename).suffix.lower()
    try:
        if suffix == ".xlsx":
            frame = pd.read_excel(io.BytesIO(content), header=None, engine="openpyxl")
        elif suffix == ".csv":
            frame = pd.read_csv(
                io.BytesIO(content),
                header=None,
                sep=";",
                dtype=str,
                keep_default_na=False,
                encoding="utf-8",
            )
        else:
            raise InvalidInputError(f"Unsupported planning file type '{suffix or filename}'")
    except InvalidInputError:
        raise
    except (
        ValueError,
        KeyError,
        OSError,
        UnicodeDecodeError,
        zipfile.BadZipFile,
        pd.errors.ParserError,
    ) as exc:
        raise InvalidInputError(f"Unable to read planning file '{filename}': {exc}") from exc

    cleaned = frame.astype(object).where(pd.notna(frame), None)
    rows: list[list[GridCell]] = []
    for values in cleaned.values.tolist():
        row = [None if value == "" else value for value in values]
        while row and row[-1] is None:
            row.pop()
        rows.append(row)

    log_event(logger, "Planning file read", filename=filename, rows=len(rows), columns=frame.shape[1])
    return rows
