"""
Model registry for the licenses app.
"""
from licenses.infrastructure.models import License

__all__ = ["License"]
