"""Core building blocks: models, matching engine, configuration and logging."""
