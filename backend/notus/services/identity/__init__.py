from notus.services.identity.resolver import (
    Exhausted,
    IdentityResolver,
    Resolved,
    email_local_part,
)

__all__ = ["Exhausted", "IdentityResolver", "Resolved", "email_local_part"]
