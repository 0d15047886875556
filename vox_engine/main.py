"""Main entry point for Vox Engine."""

import logging
import sys
from datetime import datetime
from pathlib import Path

import uvicorn
from dotenv import load_dotenv


def setup_logging(debug: bool = False, log_dir: Path = Path("data/debug_logs/server")):
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    log_file = None
    if debug:
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"server_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)

    # Root stays at INFO so library debug output stays out of the log
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )

    app_logger = logging.getLogger('vox_engine')
    app_logger.setLevel(level)

    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    startup_logger = logging.getLogger(__name__)
    if log_file:
        startup_logger.info(f"[STARTUP] Server log file: {log_file}")
    startup_logger.info(f"[STARTUP] Logging configured: vox_engine logger level={logging.getLevelName(level)}")

    return log_file


def main():
    """Run the FastAPI server."""
    # Provider API keys may live in .env
    load_dotenv()

    from vox_engine.api.app import create_app
    from vox_engine.config import ConfigLoader, ConfigLoadError, SystemConfig

    try:
        system_config = ConfigLoader().load_system_config()
    except ConfigLoadError as e:
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logging.getLogger(__name__).warning(f"[STARTUP WARNING] Could not load system config: {e}, using defaults")
        system_config = SystemConfig()

    setup_logging(debug=system_config.debug, log_dir=system_config.paths.data / "debug_logs" / "server")

    logger = logging.getLogger(__name__)
    logger.info(f"Starting Vox Engine server (debug mode: {system_config.debug})...")
    logger.info(f"Server will listen on {system_config.api_host}:{system_config.api_port}")

    uvicorn.run(
        create_app(system_config),
        host=system_config.api_host,
        port=system_config.api_port,
        log_level="info",
        log_config=None,  # Keep our basicConfig
    )


if __name__ == "__main__":
    main()
