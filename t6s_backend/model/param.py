from typing import ClassVar, Dict, Optional, Tuple

from t6s_backend.model.association import Association, Many, One
from t6s_backend.model.entity import ModelEntity


class TypeParamType(ModelEntity):
    """Primitive type of a parameter (string, integer, ...)."""
    table_name: ClassVar[str] = "TypeParamTypes"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""


class ConstraintParamType(ModelEntity):
    table_name: ClassVar[str] = "ConstraintParamTypes"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "type": One(target="TypeParamTypes", required=True),
    }

    name: str = ""
    description: str = ""


class ParamType(ModelEntity):
    """
    Parameter accepted by one or more sources.

    The default value lives behind the `DefaultValues` association resource.
    """
    table_name: ClassVar[str] = "ParamTypes"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "type": One(target="TypeParamTypes", required=True),
        "constraint": One(target="ConstraintParamTypes"),
        "default_value": One(target="ParamValues", resource="DefaultValues"),
        "sources": Many(target="Sources"),
        "param_values": Many(target="ParamValues"),
    }

    name: str = ""
    description: str = ""


class ParamValue(ModelEntity):
    """Value given to a ParamType. A value may be copied from another one."""
    table_name: ClassVar[str] = "ParamValues"
    associations: ClassVar[Dict[str, Association]] = {
        "param_type": One(target="ParamTypes", required=True),
        "origine_param_value": One(target="ParamValues", key="origineParamValue"),
    }

    value: Optional[str] = None
