"""
Administration backend of a digital signage configuration system.

Domain entities are stored on a remote REST resource server through the
engine in `t6s_backend.model.entity`; `t6s_backend.admin` answers the events of
administration clients.
"""
from t6s_backend.core import (
    ConnectionSettings, DatabaseConnection, DataException, ModelException,
    RequestException, ResponseException, T6SException
)
from t6s_backend.model import ModelEntity, ModelRegistry

__all__ = [
    "ConnectionSettings", "DatabaseConnection",
    "T6SException", "ModelException", "RequestException", "ResponseException", "DataException",
    "ModelEntity", "ModelRegistry",
]
