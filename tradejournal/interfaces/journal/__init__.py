"""FastAPI routers and schemas for the journal bounded context."""
