from dataclasses import dataclass
from typing import Optional

GENERIC_USER = "GenericUser"


@dataclass(frozen=True)
class ActingSession:
    """
    The user performing an action.

    Supplies attribution for created entries. Both fields are optional:
    an anonymous session is attributed to ``"GenericUser"`` with no owner id.
    """

    display_name: Optional[str] = None
    uid: Optional[str] = None

    @property
    def attribution_name(self) -> str:
        return self.display_name if self.display_name else GENERIC_USER
