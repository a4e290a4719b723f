#!/usr/bin/env python3
"""
Version and upload static assets to Google Cloud Storage.

Runs the static-upload CLI from a source checkout without installing the
package. Same flags as the ``static-upload`` console script.

Usage:
    python scripts/upload.py --dir v42 --files "public/**/*.js,public/**/*.css"
    python scripts/upload.py --dir v42 --files "dist/*" --dry-run
"""

import sys
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from static_upload.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
