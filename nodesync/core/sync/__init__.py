"""
Reconcilers which walk one tree and apply changes to make the other tree
match it.
"""

from pyrollup import rollup

from . import deleter, downloader, ensure, options, uploader
from .deleter import *  # noqa
from .downloader import *  # noqa
from .ensure import *  # noqa
from .options import *  # noqa
from .uploader import *  # noqa

__all__ = rollup(
    uploader,
    downloader,
    deleter,
    ensure,
    options,
)
