from .creator import Creator
from .work import Work, WORK_CATEGORIES, ALL_CATEGORIES
from .favorite import Favorite
from .like import Like
from .follow import Follow
from .review import Review
from .workshop import Workshop
from .workshop_registration import WorkshopRegistration
from .creator_profile import CreatorProfile

__all__ = [
    "Creator",
    "Work",
    "WORK_CATEGORIES",
    "ALL_CATEGORIES",
    "Favorite",
    "Like",
    "Follow",
    "Review",
    "Workshop",
    "WorkshopRegistration",
    "CreatorProfile"
]
