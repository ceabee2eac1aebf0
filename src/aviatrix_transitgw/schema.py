"""Declared configuration for a transit gateway.

This module defines the Pydantic model users edit. It enforces:
- Enum membership for cloud_type
- Non-empty identity strings
- Well-formed ``key:value`` tag entries
- Rejection of unknown fields (extra="forbid")

Cross-field rules that depend on the controller (insane mode zones, HA
sizing, cloud-specific features) are checked by the reconciler instead.

Usage:
    from aviatrix_transitgw.schema import TransitGatewayConfig

    config = TransitGatewayConfig.model_validate(yaml_dict["transit_gateway"])
"""

from __future__ import annotations

import typing as t
from dataclasses import dataclass
from enum import IntEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

HA_SUFFIX = "-hagw"


# ============================================================================
# Enums and small value types
# ============================================================================

class CloudType(IntEnum):
    """Cloud provider codes understood by the controller."""
    AWS = 1
    GCP = 4
    AZURE = 8
    OCI = 16

    @property
    def supports_tags(self) -> bool:
        return self is CloudType.AWS

    @property
    def supports_hybrid_connection(self) -> bool:
        return self is CloudType.AWS

    @property
    def supports_insane_mode(self) -> bool:
        return self is CloudType.AWS


@dataclass(frozen=True)
class ZonedSubnet:
    """A subnet pinned to an availability zone (insane mode placement)."""
    subnet: str
    zone: str = ""

    @property
    def is_zoned(self) -> bool:
        return bool(self.zone)


@dataclass(frozen=True)
class Tag:
    key: str
    value: str

    @classmethod
    def parse(cls, raw: str) -> "Tag":
        """Parse a ``key:value`` entry, trimming whitespace around both parts."""
        key, sep, value = raw.partition(":")
        if not sep or not key.strip():
            raise ValueError(f"tag '{raw}' must have the form 'key:value'")
        return cls(key=key.strip(), value=value.strip())

    def __str__(self) -> str:
        return f"{self.key}:{self.value}"


def ha_gateway_name(gw_name: str) -> str:
    """Name of the HA gateway the controller derives from the primary's name."""
    return gw_name + HA_SUFFIX


# ============================================================================
# Declared configuration
# ============================================================================

class TransitGatewayConfig(BaseModel):
    """Desired state of one transit gateway and its optional HA peer."""
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True, populate_by_name=True)

    cloud_type: CloudType = Field(
        ...,
        description="Cloud provider code (1=AWS, 4=GCP, 8=Azure, 16=OCI)"
    )
    account_name: str = Field(
        ...,
        min_length=1,
        description="Cloud account name registered on the controller"
    )
    gw_name: str = Field(
        ...,
        min_length=1,
        description="Gateway name; the primary identity of the resource"
    )
    vpc_id: str = Field(
        ...,
        min_length=1,
        description="VPC ID (AWS/GCP/OCI) or 'vnet-name:resource-group' (Azure)"
    )
    vpc_region: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("vpc_region", "vpc_reg"),
        description="Cloud region of the VPC"
    )
    gw_size: str = Field(
        ...,
        min_length=1,
        description="Instance size of the primary gateway (e.g., 't2.micro')"
    )
    subnet: str = Field(
        ...,
        min_length=1,
        description="Public subnet CIDR for the primary gateway"
    )
    insane_mode: bool = Field(
        default=False,
        description="Enable insane mode (requires insane_mode_az)"
    )
    insane_mode_az: str = Field(
        default="",
        description="Availability zone of the primary subnet when insane_mode is on"
    )
    allocate_new_eip: bool = Field(
        default=True,
        description="Allocate a new EIP; when false, 'eip' is reused"
    )
    eip: str = Field(
        default="",
        description="Existing EIP to reuse when allocate_new_eip is false"
    )
    ha_subnet: str = Field(
        default="",
        description="Subnet of the HA gateway; empty disables HA"
    )
    ha_gw_size: str = Field(
        default="",
        description="Instance size of the HA gateway; required when ha_subnet is set"
    )
    ha_insane_mode_az: str = Field(
        default="",
        description="Availability zone of the HA subnet when insane_mode is on"
    )
    ha_eip: str = Field(
        default="",
        description="Public IP to assign to the HA gateway"
    )
    enable_snat: bool = Field(default=False, description="Enable source NAT")
    tag_list: t.List[str] = Field(
        default_factory=list,
        description="Instance tags as 'key:value' entries (AWS only)"
    )
    enable_hybrid_connection: bool = Field(
        default=False,
        description="Ready the gateway for TGW hybrid connection (AWS only)"
    )
    connected_transit: bool = Field(default=False, description="Enable connected transit")
    enable_firenet_interfaces: bool = Field(default=False, description="Enable FireNet interfaces")

    @field_validator("tag_list")
    @classmethod
    def validate_tag_list(cls, v: t.List[str]) -> t.List[str]:
        return [str(Tag.parse(raw)) for raw in v]

    @property
    def ha_gw_name(self) -> str:
        return ha_gateway_name(self.gw_name)

    @property
    def ha_enabled(self) -> bool:
        return bool(self.ha_subnet)

    @property
    def tags(self) -> t.List[Tag]:
        return [Tag.parse(raw) for raw in self.tag_list]

    def primary_subnet(self) -> ZonedSubnet:
        return ZonedSubnet(self.subnet, self.insane_mode_az if self.insane_mode else "")

    def ha_zoned_subnet(self) -> ZonedSubnet:
        return ZonedSubnet(self.ha_subnet, self.ha_insane_mode_az if self.insane_mode else "")


# ============================================================================
# Public API
# ============================================================================

def validate_config(config_dict: dict) -> TransitGatewayConfig:
    """Validate a configuration dictionary against the schema.

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return TransitGatewayConfig.model_validate(config_dict)
