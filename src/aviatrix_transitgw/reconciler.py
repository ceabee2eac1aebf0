"""Create/Read/Update/Delete control flow for a transit gateway.

The reconciler turns a declared :class:`TransitGatewayConfig` into an ordered
sequence of controller calls. The HA gateway is never declared on its own:
it exists exactly when ``ha_subnet`` is non-empty and is named
``gw_name + "-hagw"``.

Failure policy:
- Local preconditions are checked before the first remote call.
- Any failed remote call stops the operation and surfaces as
  RemoteOperationError. Nothing is rolled back; the caller re-reads or
  destroys.
"""

from __future__ import annotations

import contextlib
import typing as t
from dataclasses import dataclass

from pydantic import ValidationError
from rich import print

from . import translator
from .controller import ControllerClient, GatewayRecord
from .diff import ConfigDiff, ConfigDiffAnalyzer
from .errors import ConfigValidationError, RemoteNotFound, RemoteOperationError
from .schema import CloudType, TransitGatewayConfig, ha_gateway_name

if t.TYPE_CHECKING:
    from .state_store import StateStore


@dataclass
class TransitGatewayResource:
    """One managed gateway: its bound identity plus the last known config.

    ``id`` is empty until the controller accepted the launch, and is cleared
    again when a read finds the gateway gone.
    """
    id: str = ""
    config: t.Optional[TransitGatewayConfig] = None

    @property
    def exists(self) -> bool:
        return bool(self.id)


class TransitGatewayReconciler:
    """Reconcile declared transit gateway state against the controller."""

    def __init__(self, client: ControllerClient, state_store: t.Optional[StateStore] = None) -> None:
        self.client = client
        self.state_store = state_store
        self.diff_analyzer = ConfigDiffAnalyzer()

    # ------------------------------------------------------------------
    # Remote call helpers
    # ------------------------------------------------------------------

    def _call(self, operation: str, target: str, fn: t.Callable[..., t.Any], *args: t.Any) -> t.Any:
        try:
            return fn(*args)
        except Exception as e:
            raise RemoteOperationError(operation, target, e) from e

    def _lookup(self, gw_name: str) -> t.Optional[GatewayRecord]:
        """Fetch a gateway, returning None when the controller reports it absent."""
        try:
            return self.client.get_gateway(gw_name)
        except RemoteNotFound:
            return None
        except Exception as e:
            raise RemoteOperationError("get gateway", gw_name, e) from e

    def _persist(self, resource: TransitGatewayResource) -> None:
        """Record the resource as the last-applied baseline, if a store is attached."""
        if self.state_store is None:
            return
        # A gone gateway leaves an empty baseline so the next plan shows a create
        self.state_store.save_last_applied(resource if resource.exists else TransitGatewayResource())

    @contextlib.contextmanager
    def _refresh_on_exit(self, resource: TransitGatewayResource) -> t.Iterator[None]:
        """Run exactly one read once the wrapped steps finish, even if one fails."""
        try:
            yield
        except Exception:
            try:
                self.read(resource)
            except RemoteOperationError as read_err:
                print(f"[yellow][Reconciler] Refresh after failed create also failed: {read_err}[/yellow]")
            raise
        self.read(resource)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_for_create(config: TransitGatewayConfig) -> None:
        cloud_type = config.cloud_type
        if not config.vpc_id:
            target = "azure vnet" if cloud_type is CloudType.AZURE else "vpc"
            raise ConfigValidationError(f"'vpc_id' cannot be empty for creating a transit gw for {target}")

        if config.insane_mode:
            if not cloud_type.supports_insane_mode:
                raise ConfigValidationError("insane_mode is only supported for AWS (cloud_type = 1)")
            if not config.insane_mode_az:
                raise ConfigValidationError("insane_mode_az needed if insane_mode is enabled")
            if config.ha_subnet and not config.ha_insane_mode_az:
                raise ConfigValidationError(
                    "ha_insane_mode_az needed if insane_mode is enabled and ha_subnet is set"
                )

        if config.ha_subnet and not config.ha_gw_size:
            raise ConfigValidationError(
                "A valid non empty ha_gw_size parameter is mandatory if ha_subnet is set. Example: t2.micro"
            )

        if not config.allocate_new_eip and not config.eip:
            raise ConfigValidationError("'eip' is required when allocate_new_eip is false")

        if config.tag_list and not cloud_type.supports_tags:
            raise ConfigValidationError("'tag_list' is only supported for AWS (cloud_type = 1)")

        if config.enable_hybrid_connection and not cloud_type.supports_hybrid_connection:
            raise ConfigValidationError("'enable_hybrid_connection' is only supported for AWS (cloud_type = 1)")

    @staticmethod
    def _validate_for_update(new: TransitGatewayConfig, diff: ConfigDiff) -> None:
        if diff.violates_immutability():
            raise ConfigValidationError(
                "updating " + ", ".join(diff.immutable_fields) + " is not allowed"
            )

        cloud_type = new.cloud_type
        if diff.changed("tag_list") and not cloud_type.supports_tags:
            raise ConfigValidationError("'tag_list' is only supported for AWS (cloud_type = 1)")
        if diff.changed("enable_hybrid_connection") and not cloud_type.supports_hybrid_connection:
            raise ConfigValidationError("'enable_hybrid_connection' is only supported for AWS (cloud_type = 1)")

        if new.ha_subnet:
            if new.insane_mode and not new.ha_insane_mode_az and diff.changed("ha_subnet", "ha_insane_mode_az"):
                raise ConfigValidationError(
                    "ha_insane_mode_az needed if insane_mode is enabled and ha_subnet is set"
                )
            if not new.ha_gw_size:
                raise ConfigValidationError(
                    "A valid non empty ha_gw_size parameter is mandatory if ha_subnet is set. Example: t2.micro"
                )

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(
        self, resource: TransitGatewayResource, config: TransitGatewayConfig
    ) -> t.Optional[TransitGatewayConfig]:
        """Launch the gateway, apply every declared feature, then read it back.

        ``resource.id`` is bound to ``gw_name`` only once the launch succeeds,
        so a failure in a later step still leaves the caller holding an
        identity it can read or delete.
        """
        self._validate_for_create(config)

        request = translator.to_create_payload(config)
        print(f"[Reconciler] Creating transit gateway {config.gw_name} (cloud_type={int(config.cloud_type)})")
        self._call("create transit gateway", config.gw_name, self.client.launch_transit_gateway, request)

        resource.id = config.gw_name
        resource.config = config
        with self._refresh_on_exit(resource):
            self._apply_create_features(config)
        return resource.config if resource.exists else None

    def _apply_create_features(self, config: TransitGatewayConfig) -> None:
        gw_name = config.gw_name

        if config.ha_enabled:
            ha_request = translator.to_ha_request(config)
            print(f"[Reconciler] Enabling HA on {gw_name} in subnet {ha_request.ha_subnet}")
            self._call("enable HA transit gateway", config.ha_gw_name, self.client.enable_transit_ha, ha_request)

            if config.ha_gw_size != config.gw_size:
                print(f"[Reconciler] Resizing {config.ha_gw_name} to {config.ha_gw_size}")
                self._call(
                    "resize HA transit gateway",
                    config.ha_gw_name,
                    self.client.update_gateway_size,
                    config.ha_gw_name,
                    config.ha_gw_size,
                )

        if config.tag_list:
            tags_request = translator.to_tags_request(gw_name, config.tags)
            self._call("add tags", gw_name, self.client.add_tags, tags_request)

        gateway_request = translator.to_gateway_request(config)
        if config.enable_hybrid_connection:
            self._call("attach transit gateway for hybrid", gw_name, self.client.attach_transit_for_hybrid, gateway_request)

        if config.connected_transit:
            self._call("enable connected transit", gw_name, self.client.enable_connected_transit, gateway_request)

        if config.enable_snat:
            self._call("enable SNAT", gw_name, self.client.enable_snat, gw_name)

        if config.enable_firenet_interfaces:
            self._call("enable FireNet interfaces", gw_name, self.client.enable_firenet_interfaces, gw_name)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def import_resource(self, opaque_id: str) -> TransitGatewayResource:
        """Bind an existing controller gateway; the next read fills the config."""
        return TransitGatewayResource(id=opaque_id, config=None)

    def read(self, resource: TransitGatewayResource) -> t.Optional[TransitGatewayConfig]:
        """Refresh ``resource.config`` from the controller.

        Returns None, and clears ``resource.id``, when the primary gateway no
        longer exists.
        """
        declared = resource.config
        gw_name = declared.gw_name if declared is not None else ""
        if not gw_name:
            print(f"[Reconciler] No gateway name received; importing id {resource.id}")
            gw_name = resource.id

        record = self._lookup(gw_name)
        if record is None:
            print(f"[yellow][Reconciler] Transit gateway {gw_name} not found; removing from state[/yellow]")
            resource.id = ""
            self._persist(resource)
            return None

        state: t.Dict[str, t.Any] = declared.model_dump() if declared is not None else {}
        try:
            state.update(translator.from_remote(record))
        except ValueError as e:
            raise RemoteOperationError("read transit gateway", gw_name, e) from e

        detail = self._call("get gateway detail", gw_name, self.client.get_gateway_detail, record)
        state.update(translator.from_detail(detail))

        if CloudType(record.cloud_type).supports_tags:
            reported = self._call(
                "read tag_list", gw_name, self.client.get_tags, translator.to_tags_request(record.gw_name)
            )
            declared_tags = declared.tag_list if declared is not None else []
            state["tag_list"] = translator.reconcile_tag_list(declared_tags, reported or [])

        state.update(translator.from_remote_ha(self._lookup(ha_gateway_name(record.gw_name))))

        # Controller data that the declared schema cannot hold is a failed read, not bad input
        try:
            refreshed = TransitGatewayConfig.model_validate(state)
        except ValidationError as e:
            raise RemoteOperationError("read transit gateway", gw_name, e) from e
        resource.id = resource.id or refreshed.gw_name
        resource.config = refreshed
        self._persist(resource)
        return refreshed

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(
        self,
        resource: TransitGatewayResource,
        old: TransitGatewayConfig,
        new: TransitGatewayConfig,
    ) -> t.Optional[TransitGatewayConfig]:
        """Apply the difference between ``old`` and ``new``, then re-read."""
        diff = self.diff_analyzer.compare(old, new)
        self._validate_for_update(new, diff)

        gw_name = new.gw_name
        print(f"[Reconciler] Updating transit gateway {gw_name}: {len(diff.changes)} change(s)")

        if diff.changed("gw_size"):
            self._call("resize transit gateway", gw_name, self.client.update_gateway_size, gw_name, new.gw_size)

        if diff.changed("ha_subnet", "ha_insane_mode_az"):
            self._reconcile_ha_placement(old, new)

        if diff.changed("tag_list"):
            self._reconcile_tags(old, new)

        gateway_request = translator.to_gateway_request(new)
        if diff.changed("enable_hybrid_connection"):
            if new.enable_hybrid_connection:
                self._call("attach transit gateway for hybrid", gw_name, self.client.attach_transit_for_hybrid, gateway_request)
            else:
                self._call("detach transit gateway for hybrid", gw_name, self.client.detach_transit_for_hybrid, gateway_request)

        if diff.changed("connected_transit"):
            if new.connected_transit:
                self._call("enable connected transit", gw_name, self.client.enable_connected_transit, gateway_request)
            else:
                self._call("disable connected transit", gw_name, self.client.disable_connected_transit, gateway_request)

        if diff.changed("ha_gw_size") and not self._resize_ha(new):
            # HA gateway vanished; record it as gone and stop here
            resource.config = new.model_copy(update=translator.from_remote_ha(None))
            self._persist(resource)
            return resource.config

        if diff.changed("enable_snat"):
            if new.enable_snat:
                self._call("enable SNAT", gw_name, self.client.enable_snat, gw_name)
            else:
                self._call("disable SNAT", gw_name, self.client.disable_snat, gw_name)

        if diff.changed("enable_firenet_interfaces"):
            if new.enable_firenet_interfaces:
                self._call("enable FireNet interfaces", gw_name, self.client.enable_firenet_interfaces, gw_name)
            else:
                self._call("disable FireNet interfaces", gw_name, self.client.disable_firenet_interfaces, gw_name)

        resource.config = new
        return self.read(resource)

    def _reconcile_ha_placement(self, old: TransitGatewayConfig, new: TransitGatewayConfig) -> None:
        """Create, delete or relocate the HA gateway after an ha_subnet/zone change."""
        ha_name = new.ha_gw_name
        if not old.ha_subnet and not new.ha_subnet:
            return

        # EIP selection for the HA gateway is only honored on AWS
        ha_request = translator.to_ha_request(new, include_eip=new.cloud_type is CloudType.AWS)

        if not old.ha_subnet:
            print(f"[Reconciler] Enabling HA gateway {ha_name} in subnet {ha_request.ha_subnet}")
            self._call("enable HA transit gateway", ha_name, self.client.enable_transit_ha, ha_request)
        elif not new.ha_subnet:
            print(f"[Reconciler] Deleting HA gateway {ha_name}")
            self._call("delete HA transit gateway", ha_name, self.client.delete_gateway, ha_name)
        else:
            # Relocation is delete + recreate; the controller has no in-place move
            print(f"[Reconciler] Relocating HA gateway {ha_name} to subnet {ha_request.ha_subnet}")
            self._call("delete HA transit gateway", ha_name, self.client.delete_gateway, ha_name)
            self._call("enable HA transit gateway", ha_name, self.client.enable_transit_ha, ha_request)

    def _reconcile_tags(self, old: TransitGatewayConfig, new: TransitGatewayConfig) -> None:
        removed, added = translator.tag_changes(old.tag_list, new.tag_list)
        if removed:
            request = translator.to_tags_request(new.gw_name, removed)
            self._call("delete tags", new.gw_name, self.client.delete_tags, request)
        if added:
            request = translator.to_tags_request(new.gw_name, added)
            self._call("add tags", new.gw_name, self.client.add_tags, request)

    def _resize_ha(self, new: TransitGatewayConfig) -> bool:
        """Resize the HA gateway. Returns False when it no longer exists."""
        ha_name = new.ha_gw_name
        if self._lookup(ha_name) is None:
            print(f"[yellow][Reconciler] HA gateway {ha_name} not found; clearing HA attributes[/yellow]")
            return False
        if not new.ha_gw_size:
            raise ConfigValidationError(
                "A valid non empty ha_gw_size parameter is mandatory if ha_subnet is set. Example: t2.micro"
            )
        print(f"[Reconciler] Resizing {ha_name} to {new.ha_gw_size}")
        self._call("resize HA transit gateway", ha_name, self.client.update_gateway_size, ha_name, new.ha_gw_size)
        return True

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete(self, resource: TransitGatewayResource) -> None:
        """Tear down FireNet interfaces, the HA gateway, then the primary."""
        config = resource.config
        if config is None:
            raise ConfigValidationError("cannot delete a transit gateway without a known configuration")

        gw_name = config.gw_name
        print(f"[Reconciler] Deleting transit gateway {gw_name}")

        # The controller rejects deleting a gateway with FireNet interfaces still enabled
        if config.enable_firenet_interfaces:
            self._call("disable FireNet interfaces", gw_name, self.client.disable_firenet_interfaces, gw_name)

        if config.ha_subnet:
            self._call("delete HA transit gateway", config.ha_gw_name, self.client.delete_gateway, config.ha_gw_name)

        self._call("delete transit gateway", gw_name, self.client.delete_gateway, gw_name)
        resource.id = ""
        self._persist(resource)
