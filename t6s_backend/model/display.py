"""
Screen layout and scheduling of information.

An SDI (the display installation) is split into Zones. A CallType binds a
Source to a Zone through a Renderer, and Calls of a CallType are grouped into
Profils, which Timelines organise.
"""
from typing import ClassVar, Dict, Tuple

from pydantic import Field

from t6s_backend.model.association import Association, Many, One
from t6s_backend.model.entity import ModelEntity


class Zone(ModelEntity):
    """
    Rectangle of the screen, in percentages of the screen size.
    """
    table_name: ClassVar[str] = "Zones"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""
    description: str = ""
    width: float = Field(default=0, ge=0, le=100)
    height: float = Field(default=0, ge=0, le=100)
    position_from_top: float = Field(default=0, ge=0, le=100)
    position_from_left: float = Field(default=0, ge=0, le=100)


class Renderer(ModelEntity):
    table_name: ClassVar[str] = "Renderers"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "info_type": One(target="InfoTypes", required=True),
    }

    name: str = ""
    description: str = ""


class ReceivePolicy(ModelEntity):
    table_name: ClassVar[str] = "ReceivePolicies"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""


class RenderPolicy(ModelEntity):
    table_name: ClassVar[str] = "RenderPolicies"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""
    description: str = ""


class CallType(ModelEntity):
    """
    How a Source is displayed: which Renderer, in which Zone, with which
    receive and render policies.
    """
    table_name: ClassVar[str] = "CallTypes"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "source": One(target="Sources", required=True),
        "renderer": One(target="Renderers", required=True),
        "zone": One(target="Zones", required=True),
        "receive_policy": One(target="ReceivePolicies"),
        "render_policy": One(target="RenderPolicies"),
    }

    name: str = ""
    description: str = ""


class Call(ModelEntity):
    table_name: ClassVar[str] = "Calls"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "call_type": One(target="CallTypes"),
        "profil": One(target="Profils"),
        "param_values": Many(target="ParamValues"),
    }

    name: str = ""


class Profil(ModelEntity):
    table_name: ClassVar[str] = "Profils"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "calls": Many(target="Calls"),
    }

    name: str = ""
    description: str = ""


class Timeline(ModelEntity):
    table_name: ClassVar[str] = "Timelines"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "profils": Many(target="Profils"),
    }

    name: str = ""
    description: str = ""


class Team(ModelEntity):
    table_name: ClassVar[str] = "Teams"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)

    name: str = ""


class SDI(ModelEntity):
    """
    A display installation. An SDI copied from another one keeps a link to its
    origin through `origine_sdi`.
    """
    table_name: ClassVar[str] = "SDIs"
    required_fields: ClassVar[Tuple[str, ...]] = ("name",)
    associations: ClassVar[Dict[str, Association]] = {
        "zones": Many(target="Zones"),
        "profils": Many(target="Profils"),
        "team": One(target="Teams"),
        "origine_sdi": One(target="SDIs", key="origineSDI"),
    }

    name: str = ""
    description: str = ""
    allowed_host: str = "*"
