"""Database models."""
from oomf.infra.db.models.user import StreakMilestoneModel, UserModel
from oomf.infra.db.models.friendship import FriendshipModel, BlockedUserModel, FriendshipStatus
from oomf.infra.db.models.template import TemplateModel
from oomf.infra.db.models.compliment import ComplimentModel, GuessModel, ComplimentHintModel
from oomf.infra.db.models.secret_admirer import SecretAdmirerChatModel, SecretAdmirerMessageModel
from oomf.infra.db.models.token_transaction import TokenTransactionModel
from oomf.infra.db.models.notification import NotificationModel
from oomf.infra.db.models.device import DeviceModel

__all__ = [
    "UserModel",
    "StreakMilestoneModel",
    "FriendshipModel",
    "BlockedUserModel",
    "FriendshipStatus",
    "TemplateModel",
    "ComplimentModel",
    "GuessModel",
    "ComplimentHintModel",
    "SecretAdmirerChatModel",
    "SecretAdmirerMessageModel",
    "TokenTransactionModel",
    "NotificationModel",
    "DeviceModel",
]
