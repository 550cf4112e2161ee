"""tidydir - audit directory trees against placement rules and move misplaced files.

Sub-packages:
- core: constants, error types and configuration validators
- infrastructure: logging and layered configuration
- rules: matchers and the in-memory rule set
- compliance: the directory compliance scanner
- moves: move resolution, naming scripts and move execution
- reporting: terminal and list-mode output
"""

from tidydir.core.constants import TIDYDIR_VERSION

__version__ = TIDYDIR_VERSION
