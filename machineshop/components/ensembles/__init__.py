from .stacking import estimate_weights, normalize_weights
from .super_learner import meta_dataset, meta_features

__all__ = ["estimate_weights", "meta_dataset", "meta_features", "normalize_weights"]
