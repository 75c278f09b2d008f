from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Header, HTTPException, Query, status

UserIdHeader = Annotated[Optional[str], Header(alias="x-user-id")]
UserIdQuery = Annotated[Optional[str], Query(alias="userId", min_length=1)]


def resolve_player_id(header_user_id: str | None, claimed_user_id: str | None) -> str:
    """Identity used for both writing and reading round history.

    ``claimed_user_id`` is the fix's ``userId`` on writes and the ``userId``
    query parameter on reads, so history is always keyed by an explicit user
    and a client that never sends ``x-user-id`` reads back what it wrote.
    """

    if header_user_id and claimed_user_id and header_user_id != claimed_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="x-user-id does not match userId",
        )
    player_id = header_user_id or claimed_user_id
    if not player_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="x-user-id header or userId query parameter required",
        )
    return player_id


__all__ = ["UserIdHeader", "UserIdQuery", "resolve_player_id"]
