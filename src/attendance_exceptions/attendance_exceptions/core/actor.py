from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from .exceptions import AuthorizationError
from .permissions import Capability, capabilities_for


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as seen by the services."""

    user_id: int
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)

    @classmethod
    def from_roles(cls, user_id: int, roles: Iterable[str]) -> "Actor":
        return cls(user_id=int(user_id), capabilities=capabilities_for(roles))

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def require(self, capability: Capability) -> None:
        if not self.has(capability):
            raise AuthorizationError(f"Missing permission: {capability.value}")
