"""Mapping between declared configuration and controller wire records.

Writes go declared -> wire (``to_*`` functions); reads go wire -> declared
(``from_*`` functions, which return dict fragments that the reconciler
merges into the config). String encodings of booleans and the ``~~``
composite separator never leave this module.
"""

from __future__ import annotations

import typing as t

from .controller import GatewayDetail, GatewayRecord, HaRequest, TagsRequest, TransitVpcRequest
from .schema import CloudType, Tag, TransitGatewayConfig, ZonedSubnet

COMPOSITE_SEPARATOR = "~~"
TAG_SEPARATOR = ","

_TRUE_WIRE_VALUES = {"yes", "on"}


# ============================================================================
# Scalar encodings
# ============================================================================

def encode_yes_no(value: bool) -> str:
    return "yes" if value else "no"


def encode_on_off(value: bool) -> str:
    return "on" if value else "off"


def decode_flag(value: t.Any) -> bool:
    """Decode a controller flag reported as yes/no, on/off or a real bool."""
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUE_WIRE_VALUES


def encode_zoned_subnet(zoned: ZonedSubnet) -> str:
    """Return ``subnet~~zone`` when zoned, the bare subnet otherwise."""
    if not zoned.is_zoned:
        return zoned.subnet
    return COMPOSITE_SEPARATOR.join([zoned.subnet, zoned.zone])


def first_component(composite: str) -> str:
    return composite.split(COMPOSITE_SEPARATOR, 1)[0]


def serialize_tags(tags: t.Iterable[Tag]) -> str:
    return TAG_SEPARATOR.join(str(tag) for tag in tags)


# ============================================================================
# Declared -> wire
# ============================================================================

def to_create_payload(config: TransitGatewayConfig) -> TransitVpcRequest:
    """Build the launch request for the primary gateway."""
    request = TransitVpcRequest(
        cloud_type=int(config.cloud_type),
        account_name=config.account_name,
        gw_name=config.gw_name,
        vpc_region=config.vpc_region,
        vpc_id=config.vpc_id,
        vpc_size=config.gw_size,
        subnet=encode_zoned_subnet(config.primary_subnet()),
        enable_nat=encode_yes_no(config.enable_snat),
        connected_transit=encode_yes_no(config.connected_transit),
        insane_mode=encode_on_off(config.insane_mode),
        # The controller asks whether to reuse, which is the opposite of allocating.
        reuse_eip=encode_on_off(not config.allocate_new_eip),
        enable_hybrid_connection=config.enable_hybrid_connection,
    )
    if not config.allocate_new_eip:
        request.eip = config.eip

    # Azure also needs the "vnet:resource-group" identity in its own field
    if config.cloud_type is CloudType.AZURE:
        request.vnet_name_resource_group = config.vpc_id
    return request


def to_gateway_request(config: TransitGatewayConfig) -> TransitVpcRequest:
    """Identity-only request used by hybrid and connected-transit toggles."""
    return TransitVpcRequest(
        cloud_type=int(config.cloud_type),
        account_name=config.account_name,
        gw_name=config.gw_name,
        vpc_region=config.vpc_region,
        vpc_id=config.vpc_id,
    )


def to_ha_request(config: TransitGatewayConfig, include_eip: bool = True) -> HaRequest:
    return HaRequest(
        gw_name=config.gw_name,
        ha_subnet=encode_zoned_subnet(config.ha_zoned_subnet()),
        eip=config.ha_eip if include_eip else "",
    )


def to_tags_request(gw_name: str, tags: t.Iterable[Tag] = ()) -> TagsRequest:
    return TagsRequest(
        cloud_type=int(CloudType.AWS),
        resource_name=gw_name,
        tag_list=serialize_tags(tags),
    )


# ============================================================================
# Wire -> declared
# ============================================================================

def from_remote(record: GatewayRecord) -> t.Dict[str, t.Any]:
    """Map the primary gateway record back into declared attributes.

    The insane mode zone comes from the gateway's reported zone, not from
    re-splitting the subnet string.
    """
    cloud_type = CloudType(record.cloud_type)
    insane_mode = decode_flag(record.insane_mode)

    fragment: t.Dict[str, t.Any] = {
        "cloud_type": cloud_type,
        "account_name": record.account_name,
        "gw_name": record.gw_name,
        "subnet": record.vpc_net,
        "eip": record.public_ip,
        "vpc_region": record.vpc_region,
        "gw_size": record.gw_size,
        "enable_snat": decode_flag(record.enable_nat),
        "connected_transit": decode_flag(record.connected_transit),
        "insane_mode": insane_mode,
        "insane_mode_az": record.gateway_zone if insane_mode else "",
    }

    if cloud_type is CloudType.AWS:
        fragment["vpc_id"] = first_component(record.vpc_id)
        fragment["allocate_new_eip"] = bool(record.allocate_new_eip_read)
        fragment["enable_hybrid_connection"] = bool(record.enable_hybrid_connection)
    else:
        fragment["vpc_id"] = record.vpc_id
        fragment["allocate_new_eip"] = True
        fragment["enable_hybrid_connection"] = False
    return fragment


def from_detail(detail: GatewayDetail) -> t.Dict[str, t.Any]:
    return {"enable_firenet_interfaces": bool(detail.dmz_enabled)}


def from_remote_ha(record: t.Optional[GatewayRecord]) -> t.Dict[str, t.Any]:
    """Map the HA gateway record; ``None`` (absent) clears every HA attribute."""
    if record is None:
        return {"ha_gw_size": "", "ha_subnet": "", "ha_insane_mode_az": "", "ha_eip": ""}
    return {
        "ha_eip": record.public_ip,
        "ha_subnet": record.vpc_net,
        "ha_gw_size": record.gw_size,
        "ha_insane_mode_az": record.gateway_zone if decode_flag(record.insane_mode) else "",
    }


# ============================================================================
# Tag lists
# ============================================================================

def reconcile_tag_list(declared: t.Sequence[str], reported: t.Sequence[str]) -> t.List[str]:
    """Keep the user's ordering unless the controller reports a different set."""
    if set(declared) ^ set(reported):
        return list(reported)
    return list(declared)


def tag_changes(old: t.Sequence[str], new: t.Sequence[str]) -> t.Tuple[t.List[Tag], t.List[Tag]]:
    """Return (removed, added) tags between two declared tag lists, in order."""
    old_set, new_set = set(old), set(new)
    removed = [Tag.parse(raw) for raw in old if raw not in new_set]
    added = [Tag.parse(raw) for raw in new if raw not in old_set]
    return removed, added
