"""Contract of the controller API consumed by the reconciler.

Records here carry values exactly as the controller expects them on the
wire (``"yes"``/``"no"``, ``"on"``/``"off"``, ``subnet~~zone``); only
:mod:`aviatrix_transitgw.translator` builds or reads them.
"""

from __future__ import annotations

import abc
import typing as t
from dataclasses import dataclass

GATEWAY_RESOURCE_TYPE = "gw"


@dataclass
class TransitVpcRequest:
    """Payload for launching a transit gateway and for per-gateway feature toggles."""
    cloud_type: int
    account_name: str
    gw_name: str
    vpc_region: str = ""
    vpc_id: str = ""
    vnet_name_resource_group: str = ""
    vpc_size: str = ""
    subnet: str = ""
    enable_nat: str = "no"
    connected_transit: str = "no"
    insane_mode: str = "off"
    reuse_eip: str = "off"
    eip: str = ""
    enable_hybrid_connection: bool = False


@dataclass
class HaRequest:
    gw_name: str
    ha_subnet: str
    eip: str = ""


@dataclass
class GatewayRecord:
    """Gateway as reported by the controller."""
    cloud_type: int
    account_name: str
    gw_name: str
    vpc_id: str = ""
    vpc_region: str = ""
    vpc_net: str = ""
    gw_size: str = ""
    public_ip: str = ""
    enable_nat: str = "no"
    connected_transit: str = "no"
    insane_mode: str = "no"
    gateway_zone: str = ""
    allocate_new_eip_read: bool = True
    enable_hybrid_connection: bool = False


@dataclass
class GatewayDetail:
    dmz_enabled: bool = False


@dataclass
class TagsRequest:
    cloud_type: int
    resource_name: str
    resource_type: str = GATEWAY_RESOURCE_TYPE
    tag_list: str = ""


class ControllerClient(abc.ABC):
    """Operations the reconciler issues against the controller.

    Implementations raise :class:`~aviatrix_transitgw.errors.RemoteNotFound`
    from ``get_gateway`` when the gateway does not exist, and any other
    exception for a failed call.
    """

    # Gateway lifecycle
    @abc.abstractmethod
    def launch_transit_gateway(self, request: TransitVpcRequest) -> None: ...

    @abc.abstractmethod
    def enable_transit_ha(self, request: HaRequest) -> None: ...

    @abc.abstractmethod
    def update_gateway_size(self, gw_name: str, gw_size: str) -> None: ...

    @abc.abstractmethod
    def delete_gateway(self, gw_name: str) -> None: ...

    @abc.abstractmethod
    def get_gateway(self, gw_name: str) -> GatewayRecord: ...

    @abc.abstractmethod
    def get_gateway_detail(self, gateway: GatewayRecord) -> GatewayDetail: ...

    # Tags
    @abc.abstractmethod
    def add_tags(self, request: TagsRequest) -> None: ...

    @abc.abstractmethod
    def delete_tags(self, request: TagsRequest) -> None: ...

    @abc.abstractmethod
    def get_tags(self, request: TagsRequest) -> t.List[str]: ...

    # Feature toggles
    @abc.abstractmethod
    def attach_transit_for_hybrid(self, request: TransitVpcRequest) -> None: ...

    @abc.abstractmethod
    def detach_transit_for_hybrid(self, request: TransitVpcRequest) -> None: ...

    @abc.abstractmethod
    def enable_connected_transit(self, request: TransitVpcRequest) -> None: ...

    @abc.abstractmethod
    def disable_connected_transit(self, request: TransitVpcRequest) -> None: ...

    @abc.abstractmethod
    def enable_snat(self, gw_name: str) -> None: ...

    @abc.abstractmethod
    def disable_snat(self, gw_name: str) -> None: ...

    @abc.abstractmethod
    def enable_firenet_interfaces(self, gw_name: str) -> None: ...

    @abc.abstractmethod
    def disable_firenet_interfaces(self, gw_name: str) -> None: ...
