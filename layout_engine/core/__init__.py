"""Application core: database, logging, errors, lifecycle."""
