import uvicorn
import os
import logging
from dotenv import load_dotenv

# Carica variabili ambiente
load_dotenv()

# Configurazione logging colorato PRIMA di qualsiasi altro import che usa logging
from core.logger import setup_colored_logging
setup_colored_logging("processor")

from core.config import get_config

logger = logging.getLogger(__name__)


def main():
    """Avvia il server uvicorn con porta e nome da ProcessorConfig."""
    config = get_config()
    host = os.getenv("HOST", "0.0.0.0")

    if not os.getenv("DATABASE_URL"):
        logger.warning("DATABASE_URL not set - using default local database")
    else:
        logger.info("Database URL configured")

    workers = int(os.getenv("UVICORN_WORKERS", "2"))

    logger.info(f"Starting {config.processor_name} on {host}:{config.port} with {workers} workers")

    try:
        uvicorn.run(
            "api.main:app",
            host=host,
            port=config.port,
            workers=workers,
            reload=False,
            log_level="info",
            access_log=True,
            use_colors=False  # colori gestiti da colorlog
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise


if __name__ == "__main__":
    main()
