# Business logic services
from bookclub.services.errors import DomainError, ErrorCode
from bookclub.services.permissions import Actor, authorize
from bookclub.services.lookups import active_roster

__all__ = [
    'DomainError',
    'ErrorCode',
    'Actor',
    'authorize',
    'active_roster',
]
