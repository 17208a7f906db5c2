"""Interactively delete local git branches.

Features:
- List local branches, leaving out the current and protected ones
- Pick branches to delete from a terminal checklist
- Optionally drop the remote-tracking upstream of each deleted branch
- Report every deletion failure without stopping the batch
"""

import os

# Report a missing git executable on first use instead of at import time
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

__version__ = "0.1.0"
