"""AI integration: prompts, providers and output parsing."""
