"""Capability checks the lifecycle engine depends on.

Callers are identified by the id they supply; nothing here verifies that
claim. A real auth layer can replace ``DirectoryAuthorizer`` without the
engine noticing.
"""
from __future__ import annotations

from typing import Optional, Protocol

from .directory import Directory
from .errors import NotFound, Unauthorized
from .rules.common import violation
from .schemas import Employee


class Authorizer(Protocol):
    def require_manager(self, actor_id: Optional[int]) -> Employee: ...

    def resolve_caller(self, caller_id: int) -> Employee: ...


class DirectoryAuthorizer:
    def __init__(self, directory: Directory):
        self.directory = directory

    def require_manager(self, actor_id: Optional[int]) -> Employee:
        if actor_id is None:
            raise violation("manager_required", Unauthorized, "Manager privileges required")
        try:
            actor = self.directory.resolve(actor_id)
        except NotFound:
            raise violation("manager_required", Unauthorized, "Manager privileges required") from None
        if not actor.is_manager:
            raise violation("manager_required", Unauthorized, "Manager privileges required")
        return actor

    def resolve_caller(self, caller_id: int) -> Employee:
        return self.directory.resolve(caller_id)
