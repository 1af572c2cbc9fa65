import datetime
import decimal
import pathlib
import uuid
from typing import Any

from rewire.lock_mode import LockMode

DEFAULT_BUILTIN_TYPES: frozenset[type[Any]] = frozenset(
    {
        int,
        str,
        float,
        bool,
        bytes,
        complex,
        list,
        dict,
        set,
        frozenset,
        tuple,
        object,
        type(None),
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
    },
)
"""Types the reflector reports as primitives instead of injectable classes.

Subclasses of these types are primitives as well.
"""

DEFAULT_LOCK_MODE = LockMode.THREAD
