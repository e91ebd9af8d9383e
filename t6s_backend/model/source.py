"""
Information sources and where they come from.

A Source is served by a Service, produces one InfoType and may be offered by a
Provider. It is complete once its name, method, service and info type are set.
"""
from typing import ClassVar, Dict, Optional, Tuple

from pydantic import Field

from t6s_backend.model.association import Association, Many, One
from t6s_backend.model.entity import ModelEntity


class Service(ModelEntity):
    """Remote host running sources."""
    table_name: ClassVar[str] = "Services"
    required_fields: ClassVar[Tuple[str, ...]] = ("name", "host")

    name: str = ""
    description: str = ""
    host: str = ""


class Provider(ModelEntity):
    table_name: ClassVar[str] = "Providers"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "sources": Many(target="Sources"),
    }

    name: str = ""
    description: str = ""


class InfoType(ModelEntity):
    table_name: ClassVar[str] = "InfoTypes"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""


class Source(ModelEntity):
    """
    A way of retrieving information from a Service.

    Attributes:
        method: Name of the method called on the service
        refresh_time: Seconds between two calls
        is_static: Whether the information never changes
    """
    table_name: ClassVar[str] = "Sources"
    required_fields: ClassVar[Tuple[str, ...]] = ("name", "method")
    associations: ClassVar[Dict[str, Association]] = {
        "service": One(target="Services", required=True),
        "info_type": One(target="InfoTypes", required=True),
        "provider": One(target="Providers"),
        "param_types": Many(target="ParamTypes"),
        "param_values": Many(target="ParamValues"),
        "call_types": Many(target="CallTypes"),
    }

    name: str = ""
    description: str = ""
    method: str = ""
    refresh_time: Optional[int] = Field(default=60, ge=0)
    is_static: bool = False
