"""
Tests for the association resolver, lazy slots and the fan-in of slot loads.
"""
import asyncio
import pytest

from conftest import url
from t6s_backend.core.exceptions import (
    DataException, ModelException, RequestException, ResponseException
)
from t6s_backend.model import (
    CallType, InfoType, ParamType, ParamValue, Renderer, SDI, Source, Team, Zone
)


class TestResolver:
    """Join, unjoin and fetch of related objects."""

    @pytest.mark.asyncio
    async def test_associate_puts_empty_body(self, rest):
        rest.on("PUT", url("SDIs", 1, "Zones", 4), {})
        sdi = SDI(id=1, name="Hall")

        await sdi.associate_object(SDI, Zone, 4)

        assert rest.calls == [("PUT", url("SDIs", 1, "Zones", 4), {})]

    @pytest.mark.asyncio
    async def test_dissociate_deletes_pair(self, rest):
        rest.on("DELETE", url("SDIs", 1, "Zones", 4), {})

        await SDI(id=1).delete_object_association(SDI, Zone, 4)

        assert rest.calls_to("DELETE", url("SDIs", 1, "Zones", 4))

    @pytest.mark.asyncio
    async def test_association_preconditions(self, rest):
        with pytest.raises(ModelException):
            await SDI(name="unsaved").associate_object(SDI, Zone, 4)
        with pytest.raises(ModelException):
            await SDI(id=1).associate_object(SDI, None, 4)
        with pytest.raises(ModelException):
            await SDI(id=1).associate_object(SDI, Zone, None)
        with pytest.raises(ModelException):
            await SDI(id=1).delete_object_association(None, Zone, 4)
        with pytest.raises(ModelException):
            await SDI(name="unsaved").get_associated_objects(SDI, Zone)
        assert rest.calls == []

    @pytest.mark.asyncio
    async def test_associated_objects_in_server_order(self, rest):
        rest.on("GET", url("SDIs", 1, "Zones"), [{"id": 9, "name": "B"}, {"id": 3, "name": "A"}])

        zones = await SDI(id=1).get_associated_objects(SDI, Zone)

        assert [z.id for z in zones] == [9, 3]
        assert all(isinstance(z, Zone) for z in zones)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [{"id": 3}, [{"id": 1}, {}], None])
    async def test_associated_objects_malformed(self, rest, data):
        rest.on("GET", url("SDIs", 1, "Zones"), data)

        with pytest.raises(DataException):
            await SDI(id=1).get_associated_objects(SDI, Zone)

    @pytest.mark.asyncio
    async def test_associated_objects_missing_as_empty(self, rest):
        rest.fail("GET", url("SDIs", 1, "Zones"))

        zones = await SDI(id=1).get_associated_objects(SDI, Zone, missing_as_empty=True)

        assert zones == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [[], {}])
    async def test_no_uniquely_associated_object(self, rest, data):
        """An empty array or object means there is nothing related."""
        rest.on("GET", url("Renderers", 2, "InfoTypes"), data)

        info_type = await Renderer(id=2).get_uniquely_associated_object(Renderer, InfoType)

        assert info_type is None

    @pytest.mark.asyncio
    async def test_uniquely_associated_object(self, rest):
        rest.on("GET", url("Renderers", 2, "InfoTypes"), {"id": 5, "name": "Tweet"})

        info_type = await Renderer(id=2).get_uniquely_associated_object(Renderer, InfoType)

        assert isinstance(info_type, InfoType)
        assert info_type.id == 5

    @pytest.mark.asyncio
    async def test_uniquely_associated_object_without_id(self, rest):
        rest.on("GET", url("Renderers", 2, "InfoTypes"), {"name": "Tweet"})

        with pytest.raises(DataException):
            await Renderer(id=2).get_uniquely_associated_object(Renderer, InfoType)

    @pytest.mark.asyncio
    async def test_uniquely_associated_object_missing_as_none(self, rest):
        rest.on("GET", url("Renderers", 2, "InfoTypes"), status="error")

        with pytest.raises(ResponseException):
            await Renderer(id=2).get_uniquely_associated_object(Renderer, InfoType)
        assert await Renderer(id=2).get_uniquely_associated_object(Renderer, InfoType, missing_as_none=True) is None

    @pytest.mark.asyncio
    async def test_slot_loads_propagate_failures(self, rest):
        rest.fail("GET", url("SDIs", 1, "Zones"))
        sdi = SDI(id=1)

        with pytest.raises(RequestException):
            await sdi.load("zones")
        assert not sdi.is_loaded("zones")


class TestLazyLoad:
    @pytest.mark.asyncio
    async def test_second_load_uses_cache(self, rest):
        rest.on("GET", url("Renderers", 2, "InfoTypes"), {"id": 5})
        renderer = Renderer(id=2)

        first = await renderer.load("info_type")
        second = await renderer.load("info_type")

        assert first is second
        assert renderer.is_loaded("info_type")
        assert len(rest.calls) == 1

    @pytest.mark.asyncio
    async def test_concurrent_loads_share_request(self, rest):
        rest.on("GET", url("Renderers", 2, "InfoTypes"), {"id": 5}, delay=0.01)
        renderer = Renderer(id=2)

        results = await asyncio.gather(renderer.load("info_type"), renderer.load("info_type"))

        assert results[0] is results[1]
        assert len(rest.calls) == 1

    @pytest.mark.asyncio
    async def test_failed_load_leaves_slot_unloaded(self, rest):
        rest.fail("GET", url("Renderers", 2, "InfoTypes"))
        renderer = Renderer(id=2)

        with pytest.raises(RequestException):
            await renderer.load("info_type")

        assert not renderer.is_loaded("info_type")
        assert renderer.association("info_type") is None

    @pytest.mark.asyncio
    async def test_desynchronize_forces_reload(self, rest):
        rest.on("GET", url("SDIs", 1, "Zones"), [{"id": 3}])
        rest.on("GET", url("SDIs", 1, "Zones"), [{"id": 3}, {"id": 4}])
        sdi = SDI(id=1)

        assert [z.id for z in await sdi.load("zones")] == [3]
        sdi.desynchronize()
        assert not sdi.is_loaded("zones")
        assert sdi.association("zones") == []
        assert [z.id for z in await sdi.load("zones")] == [3, 4]
        assert len(rest.calls) == 2

    @pytest.mark.asyncio
    async def test_load_after_desynchronize_is_not_overwritten(self, rest):
        """A load finishing after a desynchronize does not refill the cache."""
        rest.on("GET", url("SDIs", 1, "Zones"), [{"id": 3}], delay=0.02)
        sdi = SDI(id=1)

        pending = asyncio.ensure_future(sdi.load("zones"))
        await asyncio.sleep(0)
        sdi.desynchronize("zones")
        await pending

        assert not sdi.is_loaded("zones")

    @pytest.mark.asyncio
    async def test_complete_projection_survives_desynchronize(self, rest):
        """The projection shows what the server answered, not the reset slot."""
        rest.on("GET", url("SDIs", 1, "Zones"), [{"id": 3}], delay=0.02)
        rest.on("GET", url("SDIs", 1, "Profils"), [])
        rest.on("GET", url("SDIs", 1, "Teams"), [])
        rest.on("GET", url("SDIs", 1, "SDIs"), [])
        sdi = SDI(id=1, name="Hall")

        pending = asyncio.ensure_future(sdi.to_complete_json_object())
        await asyncio.sleep(0.005)
        sdi.desynchronize("zones")
        data = await pending

        assert [zone["id"] for zone in data["zones"]] == [3]
        assert not sdi.is_loaded("zones")

    @pytest.mark.asyncio
    async def test_load_associations_returns_values(self, rest):
        rest.on("GET", url("Sources", 2, "Services"), {"id": 1})
        rest.on("GET", url("Sources", 2, "InfoTypes"), [])
        source = Source(id=2, name="Twitter", method="search")

        values = await source.load_associations("service", "info_type")

        assert list(values) == ["service", "info_type"]
        assert values["service"].id == 1
        assert values["info_type"] is None
        assert await source.load_associations("service") == {"service": values["service"]}
        assert len(rest.calls) == 2

    @pytest.mark.asyncio
    async def test_resource_override(self, rest):
        rest.on("GET", url("ParamTypes", 5, "DefaultValues"), {"id": 8, "value": "10"})

        value = await ParamType(id=5).load("default_value")

        assert isinstance(value, ParamValue)
        assert value.value == "10"

    @pytest.mark.asyncio
    async def test_unknown_slot(self, rest):
        with pytest.raises(ModelException):
            await Zone(id=1).load("renderer")


class TestFanIn:
    @pytest.mark.asyncio
    async def test_all_slots_loaded_out_of_order(self, rest):
        """Loading every slot returns once, after the slowest one."""
        rest.on("GET", url("CallTypes", 1, "Sources"), {"id": 10}, delay=0.03)
        rest.on("GET", url("CallTypes", 1, "Renderers"), {"id": 11}, delay=0.01)
        rest.on("GET", url("CallTypes", 1, "Zones"), {"id": 12}, delay=0.02)
        rest.on("GET", url("CallTypes", 1, "ReceivePolicies"), [], delay=0.0)
        rest.on("GET", url("CallTypes", 1, "RenderPolicies"), {"id": 14}, delay=0.015)
        call_type = CallType(id=1, name="RSS")

        await call_type.load_associations()

        assert all(call_type.is_loaded(name) for name in CallType.associations)
        assert call_type.association("source").id == 10
        assert call_type.association("receive_policy") is None
        assert len(rest.calls) == 5

        await call_type.load_associations()
        assert len(rest.calls) == 5

    @pytest.mark.asyncio
    async def test_first_failure_is_raised(self, rest):
        rest.on("GET", url("CallTypes", 1, "Sources"), {"id": 10}, delay=0.02)
        rest.on("GET", url("CallTypes", 1, "Renderers"), status="error")
        rest.on("GET", url("CallTypes", 1, "Zones"), {"id": 12})
        call_type = CallType(id=1, name="RSS")

        with pytest.raises(ResponseException):
            await call_type.load_associations("source", "renderer", "zone")

        await asyncio.sleep(0.05)
        assert call_type.is_loaded("source")
        assert call_type.is_loaded("zone")
        assert not call_type.is_loaded("renderer")

    @pytest.mark.asyncio
    async def test_only_requested_slots(self, rest):
        rest.on("GET", url("Sources", 2, "Services"), {"id": 1})
        source = Source(id=2, name="Twitter", method="search")

        await source.load_associations("service")

        assert [c[1] for c in rest.calls] == [url("Sources", 2, "Services")]


class TestSingleSlot:
    @pytest.mark.asyncio
    async def test_set_association(self, rest):
        rest.on("PUT", url("CallTypes", 1, "Zones", 12), {})
        call_type = CallType(id=1, name="RSS")
        zone = Zone(id=12, name="Top")

        await call_type.set_association("zone", zone)

        assert call_type.association("zone") is zone
        assert call_type.is_loaded("zone")
        assert len(rest.calls) == 1

    @pytest.mark.asyncio
    async def test_set_association_desynchronizes_target(self, rest):
        rest.on("GET", url("Sources", 10, "CallTypes"), [])
        rest.on("PUT", url("CallTypes", 1, "Sources", 10), {})
        source = Source(id=10, name="Twitter", method="search")
        await source.load("call_types")

        await CallType(id=1).set_association("source", source)

        assert not source.is_loaded("call_types")

    @pytest.mark.asyncio
    async def test_double_set_is_refused(self, rest):
        rest.on("PUT", url("CallTypes", 1, "Zones", 12), {})
        call_type = CallType(id=1)
        await call_type.set_association("zone", Zone(id=12))

        with pytest.raises(ModelException) as exc:
            await call_type.set_association("zone", Zone(id=13))

        assert "already set" in str(exc.value)
        assert call_type.association("zone").id == 12
        assert len(rest.calls) == 1

    @pytest.mark.asyncio
    async def test_set_requires_persisted_target(self, rest):
        call_type = CallType(id=1)

        with pytest.raises(ModelException):
            await call_type.set_association("zone", Zone(name="unsaved"))
        with pytest.raises(ModelException):
            await call_type.set_association("zone", None)
        with pytest.raises(ModelException):
            await call_type.set_association("zone", Team(id=3))
        assert rest.calls == []

    @pytest.mark.asyncio
    async def test_unset_association(self, rest):
        rest.on("PUT", url("CallTypes", 1, "Zones", 12), {})
        rest.on("DELETE", url("CallTypes", 1, "Zones", 12), {})
        rest.on("PUT", url("CallTypes", 1, "Zones", 13), {})
        call_type = CallType(id=1)
        await call_type.set_association("zone", Zone(id=12))

        await call_type.unset_association("zone")
        await call_type.set_association("zone", Zone(id=13))

        assert call_type.association("zone").id == 13

    @pytest.mark.asyncio
    async def test_unset_empty_slot(self, rest):
        with pytest.raises(ModelException):
            await CallType(id=1).unset_association("zone")
        assert rest.calls == []

    @pytest.mark.asyncio
    async def test_cardinality_is_checked(self, rest):
        sdi = SDI(id=1)

        with pytest.raises(ModelException):
            await sdi.set_association("zones", Zone(id=2))
        with pytest.raises(ModelException):
            await sdi.link("zones", 2)
        with pytest.raises(ModelException):
            await sdi.add("team", 2)
        assert rest.calls == []


class TestJoinById:
    @pytest.mark.asyncio
    async def test_add_then_reload(self, rest):
        rest.on("GET", url("SDIs", 1, "Zones"), [])
        rest.on("GET", url("SDIs", 1, "Zones"), [{"id": 2}])
        rest.on("PUT", url("SDIs", 1, "Zones", 2), {})
        sdi = SDI(id=1)
        await sdi.load("zones")

        await sdi.add("zones", 2)

        assert not sdi.is_loaded("zones")
        assert [z.id for z in await sdi.load("zones")] == [2]

    @pytest.mark.asyncio
    async def test_link_and_unlink(self, rest):
        rest.on("PUT", url("Sources", 2, "Providers", 6), {})
        rest.on("DELETE", url("Sources", 2, "Providers", 6), {})
        source = Source(id=2)

        await source.link("provider", 6)
        await source.unlink("provider", 6)

        assert [c[0] for c in rest.calls] == ["PUT", "DELETE"]

    @pytest.mark.asyncio
    async def test_remove(self, rest):
        rest.on("DELETE", url("SDIs", 1, "Zones", 2), {})

        await SDI(id=1).remove("zones", 2)

        assert rest.calls_to("DELETE")
