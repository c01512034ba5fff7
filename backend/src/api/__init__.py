"""HTTP API: application factory, routers and dependencies."""
