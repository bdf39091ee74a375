"""Lifecycle hook scripts."""

from deployctl.scripting.hooks import Hook, HookCapabilities, HookScript
from deployctl.scripting.store import ScriptConfigStore

__all__ = ["Hook", "HookCapabilities", "HookScript", "ScriptConfigStore"]
