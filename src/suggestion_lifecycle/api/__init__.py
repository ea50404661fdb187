"""API layer: backend wire schemas, service routers and dependencies."""
