"""
Main entry point for the multi-agent application generator
多智能体应用生成系统主入口
"""

import sys
from pathlib import Path

# Ensure proper package structure
if __name__ == "__main__" and __package__ is None:
    # Only add to path if running as script and not in package context
    project_root = Path(__file__).parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

from aiteam.core.cli import main


if __name__ == "__main__":
    sys.exit(main())
