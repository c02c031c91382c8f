"""Identity-scoped MCP gateway for smart-glasses sessions."""
