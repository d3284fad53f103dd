# (c) Nelen & Schuurmans

from enum import Enum
from typing import Any
from typing import Union
from uuid import UUID

__all__ = ["Json", "Id", "OrderDirection"]


Json = dict[str, Any]
Id = Union[int, str, UUID]


class OrderDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"
