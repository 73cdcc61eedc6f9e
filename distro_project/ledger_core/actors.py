from dataclasses import dataclass


@dataclass(frozen=True)
class Actor:
    """
    Who is performing a posting.
    Stored on journals, ledger rows and stock movements as plain id/name
    so the ledger never depends on the auth tables.
    """

    id: str
    name: str
    role: str = ""

    @classmethod
    def from_user(cls, user):
        # Build from a Django user (request.user, management command user)
        full_name = user.get_full_name() if hasattr(user, "get_full_name") else ""
        if user.is_superuser:
            role = "admin"
        elif user.is_staff:
            role = "staff"
        else:
            role = "user"
        return cls(
            id=str(user.pk),
            name=full_name or user.get_username(),
            role=role,
        )


# Used by scheduled jobs and reconciliation
SYSTEM = Actor(id="system", name="System", role="system")


def resolve_actor(actor):
    """Accept an Actor, a Django user or None"""
    if actor is None:
        return SYSTEM
    if isinstance(actor, Actor):
        return actor
    return Actor.from_user(actor)
