"""User profile and pantry collaborators.

The real stores live in the app shell (backed by the auth session and the
profile table). The pipeline only needs these two narrow interfaces; the
in-memory implementations here serve the ad hoc runner and tests.
"""

import json
from pathlib import Path
from typing import Iterable, Optional, Protocol, Union

from pydantic import ValidationError

from sous.models.errors import NoSession
from sous.models.models import UserProfileView
from sous.utils.logger import logger


class ProfileStore(Protocol):
    """Supplies the signed-in user's profile."""

    def current_profile(self) -> UserProfileView:
        """Return the current profile.

        Raises:
            NoSession: If there is no signed-in user or no stored profile.
        """
        ...


class PantryMissingSet(Protocol):
    """Supplies the ingredient names the user marked as not available."""

    def missing_names(self) -> set[str]:
        ...


class StaticProfileStore:
    """ProfileStore holding a fixed profile (None behaves like a signed-out user)."""

    def __init__(self, profile: Optional[UserProfileView] = None) -> None:
        self.profile = profile

    def current_profile(self) -> UserProfileView:
        if self.profile is None:
            raise NoSession()
        return self.profile


class StaticPantry:
    """PantryMissingSet over a fixed collection of names."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names = {name.strip() for name in names if name and name.strip()}

    def missing_names(self) -> set[str]:
        return set(self._names)


def load_profile_file(path: Union[str, Path]) -> UserProfileView:
    """Read a JSON profile file (field names as in UserProfileView).

    Raises:
        NoSession: If the file is missing or does not hold a valid profile.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return UserProfileView.model_validate(data)
    except FileNotFoundError as e:
        raise NoSession(f"Profile file not found: {path}") from e
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Invalid profile file {path}: {e}")
        raise NoSession(f"Invalid profile file {path}") from e
