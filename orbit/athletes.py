import logging
from typing import Dict, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

SPORTS_CATEGORIES = [
    {"id": ALL_CATEGORIES, "name": "All"},
    {"id": "tennis", "name": "Tennis"},
    {"id": "f1", "name": "F1"},
    {"id": "basketball", "name": "Basketball"},
]


def filter_athletes(
    athletes: Iterable[Dict],
    search_text: str = "",
    category: str = ALL_CATEGORIES,
) -> List[Dict]:
    """Narrow athletes by category (exact, case-insensitive) and name substring."""
    result = list(athletes)

    if category and category.lower() != ALL_CATEGORIES:
        wanted = category.lower()
        result = [a for a in result if (a.get("category") or "").lower() == wanted]

    if search_text:
        needle = search_text.lower()
        result = [a for a in result if needle in (a.get("name") or "").lower()]

    return result


def athlete_subtitle(athlete: Optional[Dict], default: str = "Athlete") -> str:
    if not athlete:
        return default
    return athlete.get("subcategory") or athlete.get("category") or default


class FollowTracker:
    """Followed athlete ids for one user, kept in step with the backend."""

    def __init__(self, backend, user_id: str, followed_ids: Iterable = (), access_token: Optional[str] = None):
        self.backend = backend
        self.user_id = user_id
        self.access_token = access_token
        self.followed_ids: Set[str] = {str(athlete_id) for athlete_id in followed_ids}

    @classmethod
    def load(cls, backend, user_id: str, access_token: Optional[str] = None) -> "FollowTracker":
        followed = backend.fetch_followed_athletes(user_id, access_token=access_token)
        return cls(backend, user_id, (a["id"] for a in followed if "id" in a), access_token)

    def is_following(self, athlete_id) -> bool:
        return str(athlete_id) in self.followed_ids

    def toggle(self, athlete_id) -> bool:
        """Flip the follow state immediately; restore it if the backend refuses."""
        athlete_id = str(athlete_id)
        previous = set(self.followed_ids)
        was_following = athlete_id in previous

        if was_following:
            self.followed_ids.discard(athlete_id)
        else:
            self.followed_ids.add(athlete_id)

        success = self.backend.toggle_follow(
            self.user_id, athlete_id, was_following, access_token=self.access_token
        )
        if not success:
            logger.warning("Reverting follow state for athlete %s", athlete_id)
            self.followed_ids = previous
        return success
