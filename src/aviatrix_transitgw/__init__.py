"""Reconcile Aviatrix transit gateways against the controller API."""

from .controller import ControllerClient, GatewayDetail, GatewayRecord, HaRequest, TagsRequest, TransitVpcRequest
from .errors import ConfigValidationError, RemoteNotFound, RemoteOperationError, TransitGatewayError
from .reconciler import TransitGatewayReconciler, TransitGatewayResource
from .schema import CloudType, Tag, TransitGatewayConfig, ZonedSubnet, ha_gateway_name

__all__ = [
    "CloudType",
    "ConfigValidationError",
    "ControllerClient",
    "GatewayDetail",
    "GatewayRecord",
    "HaRequest",
    "RemoteNotFound",
    "RemoteOperationError",
    "Tag",
    "TagsRequest",
    "TransitGatewayConfig",
    "TransitGatewayError",
    "TransitGatewayReconciler",
    "TransitGatewayResource",
    "TransitVpcRequest",
    "ZonedSubnet",
    "ha_gateway_name",
]
