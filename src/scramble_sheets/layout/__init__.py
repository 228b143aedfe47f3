"""
Layout Package

Pure geometry for scramble sheets: text fitting, scramble tables,
pagination and the fixed fewest-moves sheets. Nothing here writes PDF;
output.renderer draws the plans produced here.
"""

from .composer import compose_request, compose_table, scramble_image_size
from .config import FmcConfig, SheetConfig
from .fmc import FmcSheetLayout, fmc_cutout_sheet, fmc_solution_sheet, populate_rect
from .models import ComposedSheet, FittedText, LineFragment, PagePlan, SheetRow, SheetTable
from .paginator import paginate
from .text_fit import fit_font_size, split_into_lines
from .turns import pad_turns_uniformly

__all__ = [
    "ComposedSheet",
    "FittedText",
    "FmcConfig",
    "FmcSheetLayout",
    "LineFragment",
    "PagePlan",
    "SheetConfig",
    "SheetRow",
    "SheetTable",
    "compose_request",
    "compose_table",
    "fit_font_size",
    "fmc_cutout_sheet",
    "fmc_solution_sheet",
    "paginate",
    "pad_turns_uniformly",
    "populate_rect",
    "scramble_image_size",
    "split_into_lines",
]
