import uvicorn

from vault_import.api.app import create_app
from vault_import.config.settings import Settings
from vault_import.database.connection import close_pool, init_pool
from vault_import.logging.logger import Log


def main() -> None:
    """Entry point: initialize pool -> build app -> serve HTTP."""
    settings = Settings()
    Log.configure(settings.log_level)
    if not settings.master_password:
        Log.error("MASTER_PASSWORD is not set; imports will be refused")
    init_pool(settings)

    try:
        app = create_app(settings)
        uvicorn.run(app, host=settings.api_host, port=settings.api_port)
    finally:
        close_pool()


if __name__ == "__main__":
    main()
