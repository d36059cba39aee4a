import logging
import os

from layout_engine.config import get_settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("entrypoint")


def main() -> None:
  """Launch the service; migrations run in the deploy pipeline."""
  settings = get_settings()
  logger.info("Starting course layout engine on port %s (run alembic upgrade head in deploy pipeline)...", settings.port)
  # Replace the current process so uvicorn receives SIGTERM directly.
  args = ["uvicorn", "layout_engine.main:app", "--host", "0.0.0.0", "--port", str(settings.port), "--no-server-header"]
  os.execvp("uvicorn", args)


if __name__ == "__main__":
  main()
