"""AG-UI stream bridge for the agent-execution service."""
