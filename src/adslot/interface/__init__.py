"""Process entrypoints: MCP servers, webhook app, CLI, sweep scheduler."""
