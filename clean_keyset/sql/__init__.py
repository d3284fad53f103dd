from .asyncpg_sql_database import *  # NOQA
from .column_identifiers import *  # NOQA
from .connection_builder import *  # NOQA
from .connection_loader import *  # NOQA
from .keyset_builder import *  # NOQA
from .node_loader import *  # NOQA
from .sql_provider import *  # NOQA
from .sqlalchemy_async_sql_database import *  # NOQA
