#!/usr/bin/env python3
"""Direct launcher for Budget Navigator.

Runs ``streamlit run budget_navigator/Home.py`` with the project root on
the import path.
"""

import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()

if __name__ == "__main__":
    sys.exit(subprocess.run(
        [sys.executable, "-m", "streamlit", "run", str(project_root / "budget_navigator" / "Home.py")],
        cwd=project_root,
    ).returncode)
