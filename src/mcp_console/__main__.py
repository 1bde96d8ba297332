"""Allow `python -m mcp_console`."""

import sys

from mcp_console.cli import main

sys.exit(main())
