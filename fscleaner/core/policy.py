from __future__ import annotations
from typing import Dict, Mapping

DEFAULT_POLICY_KEY = "default"


class PolicyError(ValueError):
    """Raised when a retention mapping cannot back a resolver."""


class PolicyResolver:
    """Tenant id -> retention days, falling back to the ``default`` entry.

    Unknown tenants are expected (new customers appear before the policy file
    is updated) and never raise.
    """
    def __init__(self, retention: Mapping[str, int]):
        if DEFAULT_POLICY_KEY not in retention:
            raise PolicyError(f"retention policy has no '{DEFAULT_POLICY_KEY}' entry")
        days: Dict[str, int] = {}
        for tenant, value in retention.items():
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise PolicyError(f"retention for {tenant!r} must be a non-negative integer, got {value!r}")
            days[str(tenant)] = value
        self._days = days

    @property
    def default_days(self) -> int:
        return self._days[DEFAULT_POLICY_KEY]

    def resolve(self, tenant_id: str) -> int:
        return self._days.get(tenant_id, self._days[DEFAULT_POLICY_KEY])

    def as_dict(self) -> Dict[str, int]:
        return dict(self._days)
