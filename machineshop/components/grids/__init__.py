from .grid import GridLike, expand_params, generate_grid

__all__ = ["GridLike", "expand_params", "generate_grid"]
