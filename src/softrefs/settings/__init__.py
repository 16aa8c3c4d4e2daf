from .policy import ExpiryPolicy
from .schema import DEFAULT_POLICY, POLICY_SCHEMA, merge_with_defaults, validate_policy

__all__ = ["DEFAULT_POLICY", "POLICY_SCHEMA", "ExpiryPolicy", "merge_with_defaults", "validate_policy"]
