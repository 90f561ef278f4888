"""Domain entities for the authenticated session and ownership scope."""

from dataclasses import dataclass

ADMIN_ROLE = "admin"
SUPERVISOR_ROLE = "supervisor"


@dataclass(frozen=True)
class UserSession:
    """The signed-in user, as issued by the farm API login."""

    user_id: str
    username: str
    token: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


@dataclass(frozen=True)
class ScopeQuery:
    """Whose records a module shows.

    Admins pick either every supervisor or one of them; everybody else
    sees their own records (the default, sending no parameter).
    """

    all_supervisors: bool = False
    supervisor_id: str | None = None

    @classmethod
    def parse(cls, value: str | None) -> "ScopeQuery":
        """Parse the ``supervisor`` selector: ``all``, an id, or nothing."""
        if not value:
            return cls()
        if value == "all":
            return cls(all_supervisors=True)
        return cls(supervisor_id=value)

    @property
    def key(self) -> str:
        if self.all_supervisors:
            return "all"
        return self.supervisor_id or "own"

    def to_query_params(self) -> dict[str, str]:
        if self.all_supervisors:
            return {"all_supervisors": "true"}
        if self.supervisor_id:
            return {"supervisorId": self.supervisor_id}
        return {}
