"""Technology class for installed fire/security subsystems."""
from typing import List, Optional

from .battery import Battery


class Technology:
    """A subsystem (e.g. fire alarm control panel) installed at a site."""

    def __init__(
            self,
            id: str,
            name: str,
            location: str = "",
            type: Optional[str] = None,
            batteries: Optional[List[Battery]] = None,
    ):
        self.id = str(id)
        self.name = name
        self.location = location
        self.type = type
        self.batteries = batteries or []
