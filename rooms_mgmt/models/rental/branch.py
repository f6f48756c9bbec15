"""Branch model: a rental property location."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Branch:
    """Physical rental location that owns rooms."""

    branch_id: str
    name: str
    address: str
    created_at: datetime
    updated_at: datetime
