from .resampler import Cell, CellResult, Resampler, run_cell, to_table
from .stitch import stitch_predictions

__all__ = ["Cell", "CellResult", "Resampler", "run_cell", "stitch_predictions", "to_table"]
