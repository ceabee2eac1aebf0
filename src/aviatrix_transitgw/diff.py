from __future__ import annotations

import typing as t
from dataclasses import dataclass, field
from enum import Enum

from .schema import TransitGatewayConfig


class ChangeType(Enum):
    """Classification of configuration changes."""
    NO_CHANGE = "no_change"
    MUTABLE = "mutable"      # Applied in place through controller calls
    IMMUTABLE = "immutable"  # Rejected; the gateway must be destroyed and recreated


@dataclass
class FieldChange:
    name: str
    old: t.Any
    new: t.Any

    def describe(self) -> str:
        return f"{self.name}: {self.old!r} → {self.new!r}"


@dataclass
class ConfigDiff:
    """Comparison result between the previously applied and the declared config."""
    change_type: ChangeType
    changes: t.List[FieldChange] = field(default_factory=list)
    immutable_fields: t.List[str] = field(default_factory=list)

    def has_changes(self) -> bool:
        return self.change_type != ChangeType.NO_CHANGE

    def violates_immutability(self) -> bool:
        return self.change_type == ChangeType.IMMUTABLE

    def changed(self, *names: str) -> bool:
        """True if any of the named attributes changed."""
        changed_names = {c.name for c in self.changes}
        return any(name in changed_names for name in names)

    def get(self, name: str) -> t.Optional[FieldChange]:
        for change in self.changes:
            if change.name == name:
                return change
        return None

    def format_summary(self) -> str:
        if not self.has_changes():
            return "No changes detected."

        if self.violates_immutability():
            lines = ["Immutable attributes changed (gateway must be recreated):"]
            for name in self.immutable_fields:
                change = self.get(name)
                lines.append(f"  • {change.describe() if change else name}")
            return "\n".join(lines)

        lines = ["Changes to apply in place:"]
        for change in self.changes:
            lines.append(f"  • {change.describe()}")
        return "\n".join(lines)


class ConfigDiffAnalyzer:
    """Analyzes differences between two declared configurations."""

    # Fields fixed once the gateway exists
    IMMUTABLE_FIELDS = (
        "cloud_type",
        "account_name",
        "gw_name",
        "vpc_id",
        "vpc_region",
        "subnet",
        "insane_mode",
        "insane_mode_az",
    )

    def compare(self, old: TransitGatewayConfig, new: TransitGatewayConfig) -> ConfigDiff:
        old_values = old.model_dump()
        new_values = new.model_dump()

        changes: t.List[FieldChange] = []
        immutable_fields: t.List[str] = []
        for name in TransitGatewayConfig.model_fields:
            if old_values[name] == new_values[name]:
                continue
            changes.append(FieldChange(name, old_values[name], new_values[name]))
            if name in self.IMMUTABLE_FIELDS:
                immutable_fields.append(name)

        if not changes:
            return ConfigDiff(change_type=ChangeType.NO_CHANGE)
        if immutable_fields:
            return ConfigDiff(ChangeType.IMMUTABLE, changes, immutable_fields)
        return ConfigDiff(ChangeType.MUTABLE, changes)
