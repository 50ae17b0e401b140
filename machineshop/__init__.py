"""machineshop: resampling-based tuning, selection and ensembling of models.

The stable public surface is :mod:`machineshop.api`.
"""

__version__ = "0.1.0"
