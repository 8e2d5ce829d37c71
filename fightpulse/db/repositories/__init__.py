"""Repository package for the database access layer.

Each repository wraps an ``AsyncSession`` for a single entity and together they
form the persistence gateway consumed by the services.
"""

from fightpulse.db.repositories.base import BaseRepository, SessionUnitOfWork
from fightpulse.db.repositories.event_repository import EventRepository
from fightpulse.db.repositories.fight_repository import FightRepository
from fightpulse.db.repositories.fighter_repository import FighterRepository
from fightpulse.db.repositories.follow_repository import FollowRepository
from fightpulse.db.repositories.user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "EventRepository",
    "FightRepository",
    "FighterRepository",
    "FollowRepository",
    "SessionUnitOfWork",
    "UserRepository",
]
