"""
Embedded YAML configuration template for an Aviatrix transit gateway.

When users run 'aviatrix-transitgw init' without a config file, this template
is written to 'aviatrix-transitgw.config.yaml' in their current directory for
them to customize. All fields align with the Pydantic schema in schema.py.
"""

SCHEMA_VERSION = 1

DEFAULT_CONFIG_TEMPLATE = """\
# Aviatrix Transit Gateway Configuration
# Generated from embedded template (schema version {version})
#
# Environment variables: Use ${{VAR}} syntax (e.g., ${{AWS_ACCOUNT_NAME}})
# Immutable after creation: cloud_type, account_name, gw_name, vpc_id,
#   vpc_region, subnet, insane_mode, insane_mode_az

version: {version}

transit_gateway:
  cloud_type: 1                 # 1=AWS, 4=GCP, 8=Azure, 16=OCI
  account_name: "${{AWS_ACCOUNT_NAME}}"
  gw_name: "transit-gw"
  vpc_id: "vpc-0123456789abcdef0"   # Azure: "vnet-name:resource-group"
  vpc_region: "us-east-1"
  gw_size: "t2.micro"
  subnet: "10.0.0.0/24"

  # Insane mode (AWS only): pins the subnet to an availability zone
  insane_mode: false
  insane_mode_az: ""

  # Public IP: set allocate_new_eip to false to reuse 'eip'
  allocate_new_eip: true
  eip: ""

  # HA gateway: leave ha_subnet empty to disable HA
  ha_subnet: ""
  ha_gw_size: ""
  ha_insane_mode_az: ""
  ha_eip: ""

  # Features
  enable_snat: false
  connected_transit: false
  enable_firenet_interfaces: false
  enable_hybrid_connection: false   # AWS only

  # Instance tags as "key:value" entries (AWS only)
  tag_list: []
"""


def render_template() -> str:
    return DEFAULT_CONFIG_TEMPLATE.format(version=SCHEMA_VERSION)
