"""
This module implements synchronization of a local filesystem tree with a
remote hierarchical namespace.
"""

from pyrollup import rollup

from . import exceptions, namespace, paths, sync
from .exceptions import *  # noqa
from .namespace import *  # noqa
from .paths import *  # noqa
from .sync import *  # noqa

__all__ = rollup(
    sync,
    namespace,
    paths,
    exceptions,
)
