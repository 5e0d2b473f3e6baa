"""
Capability checks shared by every meet and book operation.

The authenticated identity arrives as an Actor built by the routes from
the session; services only ever ask authorize()/require().
"""

from dataclasses import dataclass

from bookclub.services.errors import Forbidden


HOST_OR_ADMIN = 'host_or_admin'
OWNER_OR_ADMIN = 'owner_or_admin'


@dataclass(frozen=True)
class Actor:
    """Authenticated member performing an operation."""

    id: int
    is_admin: bool = False
    is_temporary: bool = False

    @classmethod
    def from_member(cls, member):
        return cls(id=member.id, is_admin=bool(member.is_admin), is_temporary=bool(member.is_temporary))


def authorize(actor: Actor, target, role: str) -> bool:
    """
    Check whether the actor holds the given role on a meet or book.

    Args:
        actor: The authenticated member
        target: A Meet for HOST_OR_ADMIN, a Book for OWNER_OR_ADMIN
        role: HOST_OR_ADMIN or OWNER_OR_ADMIN

    Returns:
        bool: True if the actor may proceed
    """
    if actor.is_admin:
        return True
    if role == HOST_OR_ADMIN:
        return target is not None and target.host_id == actor.id
    if role == OWNER_OR_ADMIN:
        return target is not None and target.added_by == actor.id
    return False


def require(actor: Actor, target, role: str, message: str) -> None:
    """Raise Forbidden with the given message unless authorize() passes."""
    if not authorize(actor, target, role):
        raise Forbidden(message)
