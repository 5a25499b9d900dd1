"""Runtime policy loaded from the config directory."""

from weighted_group.policy.resolver import POLICY_FILENAME, RegistryPolicy

__all__ = ["POLICY_FILENAME", "RegistryPolicy"]
