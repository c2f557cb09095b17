from .runtime import get_runtime_info

__all__ = ["get_runtime_info"]
