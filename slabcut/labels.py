"""Part label data encoded into label QR codes."""

from __future__ import annotations

import json
from dataclasses import dataclass

from slabcut.models import OptimizeResult

_FIELDS = (
    ("part_label", "label"),
    ("width", "width_mm"),
    ("height", "height_mm"),
    ("sheet_index", "sheet"),
    ("sheet_label", "sheet_label"),
    ("rotated", "rotated"),
    ("x", "x_mm"),
    ("y", "y_mm"),
)


def _compact_number(value):
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass
class LabelInfo:
    """Metadata printed on, and encoded into, one part label."""

    part_label: str
    width: float
    height: float
    sheet_index: int
    sheet_label: str
    rotated: bool
    x: float
    y: float

    def to_json(self) -> str:
        """Serialise to the compact JSON carried in the QR code."""
        data = {key: _compact_number(getattr(self, attr)) for attr, key in _FIELDS}
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "LabelInfo":
        """Parse label JSON; missing fields take empty values."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("label JSON must be an object")
        return cls(
            part_label=str(data.get("label", "")),
            width=float(data.get("width_mm", 0.0)),
            height=float(data.get("height_mm", 0.0)),
            sheet_index=int(data.get("sheet", 0)),
            sheet_label=str(data.get("sheet_label", "")),
            rotated=bool(data.get("rotated", False)),
            x=float(data.get("x_mm", 0.0)),
            y=float(data.get("y_mm", 0.0)),
        )


def collect_label_infos(result: OptimizeResult) -> list[LabelInfo]:
    """One label per placed part, sheets numbered from 1."""
    return [
        LabelInfo(
            part_label=p.part.label,
            width=p.part.width,
            height=p.part.height,
            sheet_index=sheet_number,
            sheet_label=sheet.stock.label,
            rotated=p.rotated,
            x=p.x,
            y=p.y,
        )
        for sheet_number, sheet in enumerate(result.sheets, start=1)
        for p in sheet.placements
    ]