from .user import User, UserRole
from .question import Question, QuestionType, Difficulty
from .user_progress import UserProgress
from .refresh_token import RefreshToken

__all__ = [
    'User', 'UserRole',
    'Question', 'QuestionType', 'Difficulty',
    'UserProgress',
    'RefreshToken',
]
