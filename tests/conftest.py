"""Shared pytest fixtures: an in-memory controller that records every call."""

import typing as t

import pytest

from aviatrix_transitgw.controller import (
    ControllerClient,
    GatewayDetail,
    GatewayRecord,
    HaRequest,
    TagsRequest,
    TransitVpcRequest,
)
from aviatrix_transitgw.errors import RemoteNotFound
from aviatrix_transitgw.reconciler import TransitGatewayReconciler
from aviatrix_transitgw.schema import TransitGatewayConfig


class FakeController(ControllerClient):
    """Controller double keeping gateways in memory.

    ``calls`` holds ``(method_name, args)`` tuples in issue order. Set
    ``failures[method_name] = exc`` to make a method raise.
    """

    def __init__(self) -> None:
        self.gateways: t.Dict[str, GatewayRecord] = {}
        self.firenet: t.Dict[str, bool] = {}
        self.tags: t.Dict[str, t.List[str]] = {}
        self.calls: t.List[t.Tuple[str, tuple]] = []
        self.failures: t.Dict[str, Exception] = {}
        self._next_ip = 10

    def _record(self, name: str, *args: t.Any) -> None:
        self.calls.append((name, args))
        if name in self.failures:
            raise self.failures[name]

    def calls_to(self, name: str) -> t.List[tuple]:
        return [args for method, args in self.calls if method == name]

    def mutating_calls(self) -> t.List[str]:
        readonly = {"get_gateway", "get_gateway_detail", "get_tags"}
        return [method for method, _ in self.calls if method not in readonly]

    def _allocate_ip(self) -> str:
        self._next_ip += 1
        return f"54.0.0.{self._next_ip}"

    def _get(self, gw_name: str) -> GatewayRecord:
        if gw_name not in self.gateways:
            raise RemoteNotFound(gw_name)
        return self.gateways[gw_name]

    # Gateway lifecycle
    def launch_transit_gateway(self, request: TransitVpcRequest) -> None:
        self._record("launch_transit_gateway", request)
        subnet, _, zone = request.subnet.partition("~~")
        reuse = request.reuse_eip == "on"
        vpc_id = request.vnet_name_resource_group or request.vpc_id
        if request.cloud_type == 1:
            vpc_id = vpc_id + "~~transit-vpc"
        self.gateways[request.gw_name] = GatewayRecord(
            cloud_type=request.cloud_type,
            account_name=request.account_name,
            gw_name=request.gw_name,
            vpc_id=vpc_id,
            vpc_region=request.vpc_region,
            vpc_net=subnet,
            gw_size=request.vpc_size,
            public_ip=request.eip if reuse else self._allocate_ip(),
            enable_nat=request.enable_nat,
            connected_transit=request.connected_transit,
            insane_mode="yes" if request.insane_mode == "on" else "no",
            gateway_zone=zone,
            allocate_new_eip_read=not reuse,
            enable_hybrid_connection=request.enable_hybrid_connection,
        )
        self.tags[request.gw_name] = []

    def enable_transit_ha(self, request: HaRequest) -> None:
        self._record("enable_transit_ha", request)
        primary = self._get(request.gw_name)
        subnet, _, zone = request.ha_subnet.partition("~~")
        ha_name = request.gw_name + "-hagw"
        self.gateways[ha_name] = GatewayRecord(
            cloud_type=primary.cloud_type,
            account_name=primary.account_name,
            gw_name=ha_name,
            vpc_id=primary.vpc_id,
            vpc_region=primary.vpc_region,
            vpc_net=subnet,
            gw_size=primary.gw_size,
            public_ip=request.eip or self._allocate_ip(),
            insane_mode=primary.insane_mode,
            gateway_zone=zone,
        )

    def update_gateway_size(self, gw_name: str, gw_size: str) -> None:
        self._record("update_gateway_size", gw_name, gw_size)
        self._get(gw_name).gw_size = gw_size

    def delete_gateway(self, gw_name: str) -> None:
        self._record("delete_gateway", gw_name)
        self._get(gw_name)
        del self.gateways[gw_name]

    def get_gateway(self, gw_name: str) -> GatewayRecord:
        self._record("get_gateway", gw_name)
        return self._get(gw_name)

    def get_gateway_detail(self, gateway: GatewayRecord) -> GatewayDetail:
        self._record("get_gateway_detail", gateway.gw_name)
        return GatewayDetail(dmz_enabled=self.firenet.get(gateway.gw_name, False))

    # Tags
    def add_tags(self, request: TagsRequest) -> None:
        self._record("add_tags", request)
        current = self.tags.setdefault(request.resource_name, [])
        for tag in request.tag_list.split(","):
            if tag and tag not in current:
                current.append(tag)

    def delete_tags(self, request: TagsRequest) -> None:
        self._record("delete_tags", request)
        removed = set(request.tag_list.split(","))
        current = self.tags.setdefault(request.resource_name, [])
        self.tags[request.resource_name] = [tag for tag in current if tag not in removed]

    def get_tags(self, request: TagsRequest) -> t.List[str]:
        self._record("get_tags", request)
        return list(self.tags.get(request.resource_name, []))

    # Feature toggles
    def attach_transit_for_hybrid(self, request: TransitVpcRequest) -> None:
        self._record("attach_transit_for_hybrid", request)
        self._get(request.gw_name).enable_hybrid_connection = True

    def detach_transit_for_hybrid(self, request: TransitVpcRequest) -> None:
        self._record("detach_transit_for_hybrid", request)
        self._get(request.gw_name).enable_hybrid_connection = False

    def enable_connected_transit(self, request: TransitVpcRequest) -> None:
        self._record("enable_connected_transit", request)
        self._get(request.gw_name).connected_transit = "yes"

    def disable_connected_transit(self, request: TransitVpcRequest) -> None:
        self._record("disable_connected_transit", request)
        self._get(request.gw_name).connected_transit = "no"

    def enable_snat(self, gw_name: str) -> None:
        self._record("enable_snat", gw_name)
        self._get(gw_name).enable_nat = "yes"

    def disable_snat(self, gw_name: str) -> None:
        self._record("disable_snat", gw_name)
        self._get(gw_name).enable_nat = "no"

    def enable_firenet_interfaces(self, gw_name: str) -> None:
        self._record("enable_firenet_interfaces", gw_name)
        self.firenet[gw_name] = True

    def disable_firenet_interfaces(self, gw_name: str) -> None:
        self._record("disable_firenet_interfaces", gw_name)
        self.firenet[gw_name] = False


BASE_CONFIG = {
    "cloud_type": 1,
    "account_name": "aws-prod",
    "gw_name": "transit-gw",
    "vpc_id": "vpc-0abc",
    "vpc_region": "us-east-1",
    "gw_size": "t2.micro",
    "subnet": "10.0.0.0/24",
}


@pytest.fixture
def controller() -> FakeController:
    return FakeController()


@pytest.fixture
def reconciler(controller) -> TransitGatewayReconciler:
    return TransitGatewayReconciler(controller)


@pytest.fixture
def make_config() -> t.Callable[..., TransitGatewayConfig]:
    """Factory for declared configs: ``make_config(ha_subnet="10.0.1.0/24")``."""
    def _make(**overrides: t.Any) -> TransitGatewayConfig:
        return TransitGatewayConfig.model_validate({**BASE_CONFIG, **overrides})
    return _make
