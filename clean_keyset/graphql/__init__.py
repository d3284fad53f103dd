from .selection import *  # NOQA
