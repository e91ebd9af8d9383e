from t6s_backend.model.association import Association, Many, One, SlotState
from t6s_backend.model.entity import ModelEntity
from t6s_backend.model.registry import ModelRegistry
from t6s_backend.model.source import InfoType, Provider, Service, Source
from t6s_backend.model.param import ConstraintParamType, ParamType, ParamValue, TypeParamType
from t6s_backend.model.display import (
    Call, CallType, Profil, ReceivePolicy, Renderer, RenderPolicy, SDI, Team, Timeline, Zone
)
from t6s_backend.model.user import Role, User

__all__ = [
    "Association", "Many", "One", "SlotState",
    "ModelEntity", "ModelRegistry",
    "InfoType", "Provider", "Service", "Source",
    "ConstraintParamType", "ParamType", "ParamValue", "TypeParamType",
    "Call", "CallType", "Profil", "ReceivePolicy", "Renderer", "RenderPolicy", "SDI", "Team", "Timeline", "Zone",
    "Role", "User",
]
