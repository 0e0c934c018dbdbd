from enum import Enum

from fastapi import Depends, HTTPException, Request

from metallbau.deps.auth import require_auth


class Role(Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


_RANK = {
    Role.EMPLOYEE: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
}


def require_role(role: Role):
    """Dependency factory: caller's role claim must rank at least `role`.

    Tokens without a role claim are treated as EMPLOYEE.
    """

    def dependency(request: Request, _auth: tuple[str, int] = Depends(require_auth)):
        claim_role = request.state.claims.get("role") or Role.EMPLOYEE.value

        try:
            user_role = Role(str(claim_role).upper())
        except ValueError as exc:
            raise HTTPException(status_code=403, detail="Invalid role claim") from exc

        if _RANK[user_role] < _RANK[role]:
            raise HTTPException(status_code=403, detail="Insufficient role")

        request.state.role = user_role.value
        return user_role

    return dependency
