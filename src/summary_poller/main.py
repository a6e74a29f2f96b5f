# main.py
import uvicorn

from summary_poller.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from summary_poller.adapters.http_status_fetcher import HttpStatusFetcher
from summary_poller.adapters.status_board_inmemory import InMemoryStatusBoard
from summary_poller.adapters.web.fastapi import create_app
from summary_poller.core.config import PollerConfig
from summary_poller.core.logging_config import configure_logging
from summary_poller.core.settings import app_settings, logger


# main lives at the outermost layer (not in core)
# Instantiates all the concrete adapters
# Wires dependencies together
# Starts the application

def main():
    # Central logging configuration BEFORE uvicorn so it adopts level/format
    configure_logging(app_settings.SUMMARY_POLLER_LOG_LEVEL)
    app_settings.print_settings(logger)

    poller_config = PollerConfig.from_app_settings(app_settings)
    http_client = AioHttpClientAdapter(total_timeout=poller_config.fetch_timeout)

    def fetcher_factory(client):
        return HttpStatusFetcher(
            client,
            base_url=app_settings.SUMMARY_POLLER_BACKEND_URL,
            status_path=app_settings.SUMMARY_POLLER_STATUS_PATH,
            timeout=poller_config.fetch_timeout,
        )

    app = create_app(
        http_client=http_client,
        fetcher_factory=fetcher_factory,
        config=poller_config,
        board=InMemoryStatusBoard(),
    )

    # Let uvicorn inherit existing logging (separate sinks & correlation ids)
    uvicorn.run(
        app,
        host=app_settings.SUMMARY_POLLER_HOST,
        port=app_settings.SUMMARY_POLLER_PORT,
        log_config=None,
        log_level=str(app_settings.SUMMARY_POLLER_LOG_LEVEL).lower(),
    )


if __name__ == "__main__":
    main()
