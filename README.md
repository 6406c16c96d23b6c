# slabcut

Lays rectangular parts out on stock sheets so that as little material as
possible is wasted, and writes the layouts out as a PDF report.

## Features

- Free-rectangle packing with best-area-fit placement, kerf allowance and
  edge trim (`slabcut.packer.GuillotinePacker`). Each sheet is packed with
  three rotation strategies and the one that places the most parts (then
  the highest efficiency) is kept.
- Grain direction on parts and stock (`Grain.NONE`, `Grain.HORIZONTAL`,
  `Grain.VERTICAL`): grain-locked parts are never rotated, and a part is
  never placed on a sheet whose grain runs the other way.
- Stock holding tabs (`StockTabConfig`, simple paddings or custom zones)
  and machine clamp zones (`CutSettings.clamp_zones`) are kept clear of parts.
- Parts and stock can carry a material. Each material is packed only on its
  own stock; stock with no material serves every material, and parts with no
  material may go on any stock.
- Small parts can be nested inside the interior cutouts of larger parts.
- Outline parts are tried at several angles when
  `CutSettings.nesting_rotations` is greater than 2.
- A genetic optimizer (fixed seed, so results repeat) that weighs waste,
  sheet count, cut length and job time according to
  `CutSettings.optimize_weights`.
- Comparison of several settings side by side.
- A PDF report with one page per sheet and a summary page.
- Part label data (`LabelInfo`) with a compact JSON form for encoding in a
  QR code.

## Installation

```
pip install .
```

## Usage

```python
from slabcut.models import Algorithm, default_settings, new_part, new_stock_sheet
from slabcut.optimizer import Optimizer
from slabcut.pdf_report import export_pdf

settings = default_settings()
parts = [
    new_part("Side panel", 600, 400, 2),
    new_part("Shelf", 500, 300, 3),
    new_part("Door", 800, 600, 1),
]
stocks = [new_stock_sheet("Plywood 2440x1220", 2440, 1220, 2)]

result = Optimizer(settings).optimize(parts, stocks)
print(f"{len(result.sheets)} sheet(s), {result.total_efficiency():.1f}% used")
for part in result.unplaced_parts:
    print("did not fit:", part.label)

export_pdf("cutlist.pdf", result, settings)
```

`export_pdf` raises `ValueError` when the result has no sheets.

The default settings are a 3 mm kerf, 10 mm edge trim, 18 mm cut depth in
6 mm passes and the guillotine algorithm. Use the genetic optimizer by
setting `settings.algorithm = Algorithm.GENETIC`, or call it directly:

```python
from slabcut.genetic import optimize_genetic

result = optimize_genetic(settings, parts, stocks)
```

Results also give a cut length and a rough job time:

```python
print(result.total_cut_length(), "mm of cutting")
print(result.estimated_job_time(1000.0, 6.0, 18.0, 2.0), "minutes")
```

Compare alternatives built from your current settings (the other algorithm,
half the kerf, no edge trim):

```python
from slabcut.compare import build_default_scenarios, compare_scenarios

for row in compare_scenarios(build_default_scenarios(settings), parts, stocks):
    print(row.scenario.name, row.sheets_used, f"{row.waste_percent:.1f}% waste")
```

Part label data, one entry per placed part with sheets numbered from 1:

```python
from slabcut.labels import LabelInfo, collect_label_infos

for info in collect_label_infos(result):
    text = info.to_json()  # keys: label, width_mm, height_mm, sheet, sheet_label, rotated, x_mm, y_mm
    assert LabelInfo.from_json(text) == info
```

## Modules

- `slabcut.models` – parts, stock sheets, settings, results, outlines.
- `slabcut.packer` – the free-rectangle packer and rectangle operations.
- `slabcut.optimizer` – material grouping, stock selection and packing.
- `slabcut.genetic` – the genetic optimizer.
- `slabcut.compare` – scenario comparison.
- `slabcut.labels` – part label data.
- `slabcut.pdf_report` – the PDF report.

## What it does not do

This is a library only. It has no graphical interface and no command-line
program, does not generate machine G-code, and does not render label sheets
or QR code images: `slabcut.labels` provides the label data and its JSON
text, which you can pass to a QR or label tool of your choice.

## Running the tests

```
pip install .[test]
pytest
```