"""
Username resolution

Finds a handle that no live user holds. Collisions are decorated with a
millisecond timestamp (and a random component on later attempts) and
re-checked, for a bounded number of attempts.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from notus.config import USERNAME_RESOLVE_MAX_ATTEMPTS
from notus.env import SRC_LOG_LEVELS
from notus.models.users import UsersTable
from notus.services.errors import Conflict
from sqlalchemy.orm import Session

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["AUTH"])

USERNAME_MAX_LENGTH = 64


@dataclass(frozen=True)
class Resolved:
    username: str
    attempts: int


@dataclass(frozen=True)
class Exhausted:
    base: str
    tried: List[str]


ResolveResult = Union[Resolved, Exhausted]


def email_local_part(email: str) -> str:
    return email.split("@")[0].strip().lower() or "user"


class IdentityResolver:
    def __init__(
        self,
        users: UsersTable,
        max_attempts: int = USERNAME_RESOLVE_MAX_ATTEMPTS,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.users = users
        self.max_attempts = max(1, max_attempts)
        self.clock = clock
        self.rng = rng or random.Random()

    def _decorate(self, base: str, attempt: int) -> str:
        suffix = f"_{int(self.clock() * 1000)}"
        if attempt > 1:
            suffix += f"_{self.rng.randint(0, 9999)}"
        return f"{base[: USERNAME_MAX_LENGTH - len(suffix)]}{suffix}"

    def resolve(self, desired: str, db: Optional[Session] = None) -> ResolveResult:
        """
        Try ``desired`` as-is, then decorated variants. Never raises on
        exhaustion; the caller picks the fallback.
        """
        base = desired[:USERNAME_MAX_LENGTH]
        candidate = base
        tried = []

        for attempt in range(self.max_attempts):
            tried.append(candidate)
            if not self.users.username_exists(candidate, db=db):
                return Resolved(username=candidate, attempts=attempt + 1)
            candidate = self._decorate(base, attempt + 1)

        log.warning(f"Username resolution exhausted for '{base}' after {len(tried)} attempts")
        return Exhausted(base=base, tried=tried)

    def resolve_username(
        self,
        desired: Optional[str],
        fallback_base: str,
        db: Optional[Session] = None,
    ) -> str:
        """
        Resolve ``desired``; when that loop exhausts, run the same loop once
        more from ``fallback_base``. Raises ``Conflict`` if both exhaust.
        """
        bases = [b for b in (desired, fallback_base) if b]
        for base in bases:
            result = self.resolve(base, db=db)
            if isinstance(result, Resolved):
                return result.username

        raise Conflict()
