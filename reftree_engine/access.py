"""Bundle-level access gate."""

from typing import Optional

from reftree_engine.interfaces import Account, UserContext


class AccessGuard:
    """Checks one deliberately coarse permission before a tree is built.

    Per-entity visibility is left to each entity's own ``view`` check
    during assembly; this gate only rejects users who may not see trees
    at all.
    """

    def __init__(self, user_context: UserContext, permission: str = "access content"):
        self.user_context = user_context
        self.permission = permission

    def resolve_user(self, user: Optional[Account] = None) -> Account:
        """The given user, or the current one."""
        return user if user is not None else self.user_context.current_user()

    def has_access(self, user: Optional[Account] = None) -> bool:
        """Whether the user (current user by default) holds the permission."""
        return self.resolve_user(user).has_permission(self.permission)
