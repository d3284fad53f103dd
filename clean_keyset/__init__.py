# -*- coding: utf-8 -*-
# (c) Nelen & Schuurmans

from .base.domain.cursor import *  # NOQA
from .base.domain.exceptions import *  # NOQA
from .base.domain.pagination import *  # NOQA
from .base.domain.requested_fields import *  # NOQA
from .base.domain.types import *  # NOQA
from .base.infrastructure.mapper import *  # NOQA
from .graphql.selection import get_requested_fields  # NOQA
from .sql.connection_loader import ConnectionLoader  # NOQA
from .sql.node_loader import NodeLoader  # NOQA
from .sql.sql_provider import *  # NOQA

# fmt: off
__version__ = '0.1.0.dev0'
# fmt: on
