# src/sheetcheck/dataloader/dataset.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from sheetcheck.errors import DataError

logger = logging.getLogger(__name__)

Dataset = dict[str, list[dict[str, Any]]]


class DatasetLoader:
    """
    JSON snapshot -> Dataset.

    The snapshot is a JSON object mapping sheet names to arrays of row
    objects, exactly the shape the validation engine consumes. Parsing of
    CSV/XLSX files happens upstream; this loader only reads snapshots that
    an ingestion step already produced.

    Fatal errors (raise DataError):
      - file missing / unreadable / not valid JSON
      - root is not an object, a sheet is not an array, a row is not an object
    """

    def load(self, path: Path) -> Dataset:
        data = self._read_json(path)
        dataset = coerce_dataset(data)
        logger.info(
            "DatasetLoader OK: %d sheet(s), %d row(s) from %s",
            len(dataset),
            sum(len(rows) for rows in dataset.values()),
            path,
        )
        return dataset

    def _read_json(self, path: Path) -> Any:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="DatasetLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the dataset snapshot.",
            )
        if not path.exists():
            raise DataError(
                message=f"Dataset snapshot not found: {path}",
                source="DatasetLoader._read_json",
                suggested_action="Verify file path and ensure the JSON snapshot is present.",
            )
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Dataset snapshot is not valid JSON: {e}",
                source="DatasetLoader._read_json",
                suggested_action="Re-export the snapshot as {sheet: [row, ...]} JSON.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read dataset snapshot: {e}",
                source="DatasetLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e


def coerce_sheet(sheet_name: str, sheet: Any) -> list[dict[str, Any]]:
    """
    @brief
    Normalize one sheet into a list of plain row dictionaries.

    @details
    Accepts a pandas DataFrame (missing cells become None) or a sequence
    of mappings. Column names are converted to strings; row order is kept.

    @raises
        DataError
            If the sheet or one of its rows has an unsupported shape.
    """
    if isinstance(sheet, pd.DataFrame):
        frame = sheet.astype(object).where(pd.notna(sheet), None)
        frame.columns = [str(c) for c in frame.columns]
        return frame.to_dict(orient="records")

    if isinstance(sheet, (str, bytes)) or not isinstance(sheet, Sequence):
        raise DataError(
            message=f"Sheet '{sheet_name}' must be a list of rows, got {type(sheet).__name__}",
            source="dataset.coerce_sheet",
            suggested_action="Provide each sheet as a list of {column: value} mappings.",
        )

    rows: list[dict[str, Any]] = []
    for idx, row in enumerate(sheet):
        if not isinstance(row, Mapping):
            raise DataError(
                message=f"Row {idx} of sheet '{sheet_name}' is not a mapping",
                source="dataset.coerce_sheet",
                suggested_action="Each row must map column names to cell values.",
            )
        rows.append({str(k): v for k, v in row.items()})
    return rows


def coerce_dataset(data: Any) -> Dataset:
    """Normalize a sheet-name -> sheet mapping; sheet order is preserved."""
    if not isinstance(data, Mapping):
        raise DataError(
            message=f"Dataset must be a mapping of sheet name to rows, got {type(data).__name__}",
            source="dataset.coerce_dataset",
            suggested_action="Provide {sheet_name: [row, ...]}.",
        )
    return {str(name): coerce_sheet(str(name), sheet) for name, sheet in data.items()}


__all__ = ["Dataset", "DatasetLoader", "coerce_dataset", "coerce_sheet"]
