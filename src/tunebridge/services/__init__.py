"""Services: HTTP transport, platform adapters, URL parsing and conversion orchestration."""
