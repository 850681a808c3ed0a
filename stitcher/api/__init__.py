# API package - FastAPI routers and dependencies
