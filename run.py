"""Run script for Pull Counter."""
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from pull_counter.main import main

if __name__ == "__main__":
    main()
