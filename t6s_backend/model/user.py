from typing import ClassVar, Dict, Optional, Tuple

from t6s_backend.model.association import Association, Many, One
from t6s_backend.model.entity import ModelEntity


class Role(ModelEntity):
    table_name: ClassVar[str] = "Roles"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""


class User(ModelEntity):
    """Administrator account. Complete once it has a username and an email."""
    table_name: ClassVar[str] = "Users"
    required_fields: ClassVar[Tuple[str, ...]] = ("username", "email")
    associations: ClassVar[Dict[str, Association]] = {
        "default_team": One(target="Teams", resource="DefaultTeams"),
        "teams": Many(target="Teams"),
    }

    username: str = ""
    email: str = ""
    token: Optional[str] = None
    last_ip: Optional[str] = None
    cms_id: Optional[str] = None
    cms_authkey: Optional[str] = None

    @classmethod
    async def find_one_by_token(cls, token: str, attempt_number: int = 0) -> "User":
        return await cls.find_one_by("token", token, attempt_number)
