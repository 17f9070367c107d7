# tests/utils/force_mtime_advance.py

import os
from pathlib import Path


def force_mtime_advance(path: Path, seconds: float = 1.0) -> None:
    """Bump a file's mtime without sleeping (filesystem resolution varies)."""
    st = path.stat()
    os.utime(path, (st.st_atime, st.st_mtime + seconds))
