"""
nodesync: synchronize a local folder with a ZooKeeper tree.
"""

from pyrollup import rollup

from . import core
from .core import *  # noqa

__all__ = rollup(core)
