from pyrollup import rollup

from . import client, zookeeper
from .client import *  # noqa
from .zookeeper import *  # noqa

__all__ = rollup(client, zookeeper)
