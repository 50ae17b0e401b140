from .input_spec import InputSpec

__all__ = ["InputSpec"]
