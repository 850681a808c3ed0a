# Core package - configuration, logging, database and Redis wiring
