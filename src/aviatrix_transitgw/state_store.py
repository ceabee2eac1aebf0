from __future__ import annotations

import datetime as dt
import hashlib
import json
import typing as t
from pathlib import Path

from rich import print

from .reconciler import TransitGatewayResource
from .schema import TransitGatewayConfig


def _get_package_version() -> str:
    """Get the installed package version recorded alongside the baseline."""
    try:
        from importlib.metadata import version
        return version("aviatrix-transitgw")
    except Exception:
        return "unknown"


class StateStore:
    """Persist the last-applied baseline of one transit gateway as JSON."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load_last_applied(self) -> t.Optional[TransitGatewayResource]:
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            print(f"[yellow][StateStore] Ignoring unreadable state file {self.path}: {e}[/yellow]")
            return None
        config = payload.get("config")
        return TransitGatewayResource(
            id=payload.get("id", ""),
            config=TransitGatewayConfig.model_validate(config) if config else None,
        )

    @staticmethod
    def _hash_cfg(config: TransitGatewayConfig) -> str:
        s = json.dumps(config.model_dump(mode="json"), sort_keys=True).encode()
        return hashlib.sha256(s).hexdigest()

    def save_last_applied(self, resource: TransitGatewayResource) -> None:
        config = resource.config
        payload = {
            "id": resource.id,
            "config_hash": self._hash_cfg(config) if config is not None else None,
            "package_version": _get_package_version(),
            "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
            "config": config.model_dump(mode="json") if config is not None else None,
        }
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"[StateStore] Saved baseline for '{resource.id}' to {self.path}")
