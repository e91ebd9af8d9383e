"""
Association slots between entity kinds.

A kind declares its relations as a mapping of slot name to `One` (single
cardinality) or `Many` (multiple cardinality). Each entity instance then owns
one SlotState per declared slot: a loaded flag, the cached value and the load
currently in flight, if any.
"""
import asyncio
from typing import Any, ClassVar, Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class Association(BaseModel):
    """Declaration of a relation towards another resource."""
    target: str
    required: bool = False
    resource: Optional[str] = None  # URL segment when it differs from the target resource
    key: Optional[str] = None       # key in the complete JSON projection

    many: ClassVar[bool] = False

    model_config = {"frozen": True}

    @property
    def resource_name(self) -> str:
        return self.resource if self.resource is not None else self.target

    def json_key(self, slot_name: str) -> str:
        return self.key if self.key is not None else to_camel(slot_name)

    def empty_value(self) -> Any:
        return [] if self.many else None


class One(Association):
    """At most one related entity."""
    many: ClassVar[bool] = False


class Many(Association):
    """An ordered collection of related entities, in server order."""
    many: ClassVar[bool] = True


class SlotState:
    """Lazy cache of one association slot of one entity."""
    __slots__ = ("loaded", "value", "pending", "generation")

    def __init__(self, spec: Association):
        self.loaded = False
        self.value: Any = spec.empty_value()
        self.pending: Optional[asyncio.Future] = None
        # Bumped on every reset so that a load started earlier cannot refill the cache.
        self.generation = 0

    def reset(self, spec: Association) -> None:
        self.loaded = False
        self.value = spec.empty_value()
        self.pending = None
        self.generation += 1

    def __repr__(self) -> str:
        return f"SlotState(loaded={self.loaded}, pending={self.pending is not None})"
