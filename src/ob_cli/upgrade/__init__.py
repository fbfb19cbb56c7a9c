"""ob upgrade system: handoff decision and thunk migration."""

from __future__ import annotations

from .handoff import HANDOFF_VETO_ACTION, decide_handoff, hand_off_to_project_tool, is_handoff_veto
from .orchestrator import UpgradeResult, migrate_tool, update_tool, upgrade_tool

__all__ = [
    "HANDOFF_VETO_ACTION",
    "UpgradeResult",
    "decide_handoff",
    "hand_off_to_project_tool",
    "is_handoff_veto",
    "migrate_tool",
    "update_tool",
    "upgrade_tool",
]
