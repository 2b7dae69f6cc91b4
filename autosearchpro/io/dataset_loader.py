"""
Evaluation dataset ingestion.

This is the single validation boundary for datasets: everything downstream
receives EvaluationDataItem objects. Parsing never raises for bad content;
it returns InvalidDataset(reason) instead.

JSON: [{"id": ..., "description": "...", "groundTruth": [{"keyword": "...", "frequency": 2}, ...]}, ...]
CSV:  columns id, description, groundTruth   (groundTruth = "react:3,node:2,sql")
"""
from __future__ import annotations

import csv
import io
import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

from autosearchpro.models import EvaluationDataItem, KeywordItem


@dataclass(frozen=True)
class ValidDataset:
    items: List[EvaluationDataItem]


@dataclass(frozen=True)
class InvalidDataset:
    reason: str


DatasetParseResult = Union[ValidDataset, InvalidDataset]


def _ground_truth_from(raw: Any) -> List[KeywordItem]:
    out: List[KeywordItem] = []
    if not isinstance(raw, (list, tuple)):
        return out
    for entry in raw:
        if isinstance(entry, KeywordItem):
            out.append(entry)
            continue
        if not isinstance(entry, dict):
            continue
        try:
            out.append(KeywordItem.from_dict(entry))
        except ValueError:
            continue
    return out


def validate_item(obj: Any, index: int = 0) -> Optional[EvaluationDataItem]:
    """
    One evaluation unit or None when the shape is unusable.

    Usable means a non-empty string description. Malformed ground-truth
    entries are dropped; a missing id becomes "item-<index>".
    """
    if isinstance(obj, EvaluationDataItem):
        if not isinstance(obj.description, str) or not obj.description.strip():
            return None
        return obj
    if not isinstance(obj, dict):
        return None

    description = obj.get("description")
    if not isinstance(description, str) or not description.strip():
        return None

    raw_id = obj.get("id")
    item_id = raw_id if isinstance(raw_id, (str, int)) and raw_id != "" else f"item-{index}"
    return EvaluationDataItem(
        id=item_id,
        description=description,
        ground_truth=tuple(_ground_truth_from(obj.get("groundTruth"))),
    )


def _is_strict_json_item(obj: Any) -> bool:
    if not isinstance(obj, dict) or not obj.get("description"):
        return False
    gt = obj.get("groundTruth")
    if not isinstance(gt, list):
        return False
    for k in gt:
        if not isinstance(k, dict) or not k.get("keyword"):
            return False
        freq = k.get("frequency")
        if isinstance(freq, bool) or not isinstance(freq, (int, float)):
            return False
        # json.loads accepts Infinity and NaN
        if isinstance(freq, float) and not math.isfinite(freq):
            return False
    return True


def parse_json_dataset(text: str) -> DatasetParseResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return InvalidDataset(f"Invalid JSON: {exc.msg} (line {exc.lineno})")

    if not isinstance(data, list) or not data:
        return InvalidDataset("Invalid dataset format. Expecting a non-empty array of evaluation items.")

    for idx, obj in enumerate(data):
        if not _is_strict_json_item(obj):
            return InvalidDataset(
                f"Invalid dataset structure at item {idx}: each item needs a description and a "
                "groundTruth array of {keyword, frequency} objects."
            )

    items = [validate_item(obj, idx) for idx, obj in enumerate(data)]
    return ValidDataset(items=[it for it in items if it is not None])


def parse_ground_truth_cell(cell: str) -> List[KeywordItem]:
    """'react:3, node:2, sql' -> KeywordItems; frequency defaults to 1, blank keywords dropped."""
    out: List[KeywordItem] = []
    for part in (cell or "").split(","):
        pieces = part.split(":")
        keyword = pieces[0].strip()
        if not keyword:
            continue
        freq = 1
        if len(pieces) > 1:
            try:
                freq = int(pieces[1].strip())
            except ValueError:
                freq = 1
        out.append(KeywordItem(keyword=keyword, frequency=freq if freq >= 1 else 1))
    return out


def parse_csv_dataset(text: str) -> DatasetParseResult:
    reader = csv.DictReader(io.StringIO(text or ""))
    fields = [f.strip() for f in (reader.fieldnames or [])]
    if "description" not in fields:
        return InvalidDataset("Invalid CSV format: expected columns id, description, groundTruth.")
    reader.fieldnames = fields

    items: List[EvaluationDataItem] = []
    for idx, row in enumerate(reader):
        if not any((v or "").strip() for v in row.values() if isinstance(v, str)):
            continue
        obj = {
            "id": (row.get("id") or "").strip(),
            "description": row.get("description") or "",
        }
        item = validate_item(obj, idx)
        if item is None:
            continue
        # Unquoted "a:1,b:2" spills into extra columns; rejoin when groundTruth is last.
        cell = row.get("groundTruth") or ""
        if fields and fields[-1] == "groundTruth" and row.get(None):
            cell = ",".join([cell] + [v for v in row[None] if isinstance(v, str)])
        items.append(
            EvaluationDataItem(
                id=item.id,
                description=item.description,
                ground_truth=tuple(parse_ground_truth_cell(cell)),
            )
        )

    if not items:
        return InvalidDataset("Invalid CSV format or empty file.")
    return ValidDataset(items=items)


def load_dataset(path: Union[str, Path]) -> DatasetParseResult:
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix not in (".json", ".csv"):
        return InvalidDataset("Unsupported file format. Please provide a .json or .csv file.")
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        return InvalidDataset(f"Could not read dataset file: {exc.strerror or type(exc).__name__}")
    if suffix == ".csv":
        return parse_csv_dataset(text)
    return parse_json_dataset(text)
