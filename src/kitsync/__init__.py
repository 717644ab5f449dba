"""kitsync: keep package-owned skills and config entries in sync across agent profiles.

For library use, import the top-level operations:
    from kitsync.api import apply_content, apply_config, clean_content, clean_config

Import from submodules:
- version: __version__
- api: sync_project, clean_project and the four phase operations
"""

import logging

from kitsync.version import __version__ as __version__

logging.getLogger(__name__).addHandler(logging.NullHandler())
