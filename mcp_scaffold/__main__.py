"""Allow ``python -m mcp_scaffold``."""

from mcp_scaffold.orchestrator import main

main()
