from diforge.lock_mode import LockMode

DEFAULT_LOCK_MODE = LockMode.THREAD

SYNTHESIZED_CLASS_SUFFIX = "DIForgeSubclass"
"""Appended to the target class name of every synthesized subclass."""

DISPATCH_TABLE_ATTRIBUTE = "_diforge_dispatch_table"
RESOLVER_ATTRIBUTE = "_diforge_resolver"
