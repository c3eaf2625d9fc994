# pte_api/models/__init__.py

from .user import User
from .user_profile import UserProfile
from .user_progress import UserProgress
from .subscription import Subscription
from .pte_test import PteTest
from .pte_question import PteQuestion
from .attempt import Attempt, AttemptAnswer
from .practice_attempt import PracticeAttempt
from .conversation import ConversationSession, ConversationTurn
from .usage_log import AIUsageLog

__all__ = [
    "User",
    "UserProfile",
    "UserProgress",
    "Subscription",
    "PteTest",
    "PteQuestion",
    "Attempt",
    "AttemptAnswer",
    "PracticeAttempt",
    "ConversationSession",
    "ConversationTurn",
    "AIUsageLog",
]
