"""Friendship and block lookups backing the identity gate."""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func

from oomf.domain.identity.repositories import IdentityGate
from oomf.infra.db.models.friendship import BlockedUserModel, FriendshipModel, FriendshipStatus


class FriendshipRepositoryImpl(IdentityGate):
    """Read-only view of the social graph tables."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_friend(self, user_a: str, user_b: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(FriendshipModel).where(
                FriendshipModel.status == FriendshipStatus.ACCEPTED,
                or_(
                    and_(FriendshipModel.requester_id == user_a, FriendshipModel.addressee_id == user_b),
                    and_(FriendshipModel.requester_id == user_b, FriendshipModel.addressee_id == user_a),
                ),
            )
        )
        return (result.scalar() or 0) > 0

    async def is_blocked(self, blocker_id: str, blocked_id: str) -> bool:
        result = await self.session.execute(
            select(func.count()).select_from(BlockedUserModel).where(
                BlockedUserModel.blocker_id == blocker_id,
                BlockedUserModel.blocked_id == blocked_id,
            )
        )
        return (result.scalar() or 0) > 0
