from .cursor import *  # NOQA
from .exceptions import *  # NOQA
from .pagination import *  # NOQA
from .requested_fields import *  # NOQA
from .types import *  # NOQA
