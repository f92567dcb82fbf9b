from .user import User
from .post import Post
from .streak import Streak
from .follow import Follow
from .like import Like
from .comment import Comment

__all__ = [
    "User",
    "Post",
    "Streak",
    "Follow",
    "Like",
    "Comment",
]
