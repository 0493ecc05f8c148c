from __future__ import annotations

import logging
import sys

from pydantic import ValidationError

from portfolio_relay.app_factory import create_app
from portfolio_relay.env_loader import load_local_env
from portfolio_relay.settings import ConfigurationError, get_settings


load_local_env()

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("portfolio-relay")

try:
    settings = get_settings()
    settings.ensure_ready()
    logging.getLogger().setLevel(settings.log_level)
    app = create_app(settings)
except (ConfigurationError, ValidationError) as exc:
    logger.error("ERROR: %s", exc)
    sys.exit(1)

logger.info("Server configured for http://%s:%s", settings.host, settings.port)
logger.info("API key authentication enabled")
logger.info(
    "CORS configured for origin: %s",
    ", ".join(settings.allowed_origins) or "none (cross-origin requests are refused)",
)
logger.info(
    "Rate limiting enabled (%d req/%dmin per IP)",
    settings.rate_limit_max,
    settings.rate_limit_window_minutes,
)
logger.info("Upstream provider: %s", settings.provider)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
