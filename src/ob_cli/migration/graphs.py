"""The closed set of migration graphs an ob tool instance carries."""

from __future__ import annotations

from enum import Enum

HASH_SCRIPT_SUFFIX = ".hash.sh"


class MigrationGraphId(Enum):
    UPGRADE = "obelisk-upgrade"
    HANDOFF = "obelisk-handoff"

    @property
    def resource_name(self) -> str:
        """File name of the graph under ``<tool>/migration/``."""
        return self.value

    @property
    def hash_script_name(self) -> str:
        """File name of the hash script under ``<tool>/migration/``."""
        return f"{self.value}{HASH_SCRIPT_SUFFIX}"

    @classmethod
    def from_name(cls, name: str) -> "MigrationGraphId":
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Invalid graph name {name!r} (expected one of: {valid})") from None
