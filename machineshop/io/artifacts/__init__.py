from .serialization import SaveResult, load_trained, save_trained

__all__ = ["SaveResult", "load_trained", "save_trained"]
