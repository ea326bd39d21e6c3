"""Caller identity passed explicitly into every booking command."""

import uuid
from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    GUEST = "guest"
    HOST = "host"
    SYSTEM = "system"


@dataclass(frozen=True)
class CallerIdentity:
    """An authenticated caller as resolved by the identity service."""

    id: uuid.UUID
    role: Role

    @property
    def is_system(self) -> bool:
        return self.role == Role.SYSTEM


# Identity used for machine callbacks authenticated by a shared secret.
SYSTEM_CALLER = CallerIdentity(id=uuid.UUID(int=0), role=Role.SYSTEM)
