"""
Core building blocks for persistkit entities and metadata handling.
"""

from .fields import AutoField, Field, IntegerField, StringField
from .model import Model, ModelConfigurationError, ModelMeta, ModelOptions

__all__ = [
    "AutoField",
    "Field",
    "IntegerField",
    "Model",
    "ModelConfigurationError",
    "ModelMeta",
    "ModelOptions",
    "StringField",
]
