from fastapi import FastAPI

from vault_import.api import routes
from vault_import.config.settings import Settings
from vault_import.crypto.cache import DecryptionCache
from vault_import.crypto.cipher import EnvelopeCipher
from vault_import.database.repositories.credentials_repository import CredentialsRepository
from vault_import.ingestion.pipeline import ImportPipeline, build_pipeline
from vault_import.ingestion.reader import CredentialReader
from vault_import.ingestion.upload_loader import UploadLoader


def create_app(
    settings: Settings,
    *,
    pipeline: ImportPipeline | None = None,
    reader: CredentialReader | None = None,
    repo: CredentialsRepository | None = None,
) -> FastAPI:
    """Build the FastAPI app and wire its dependencies onto ``app.state``."""
    repo = repo if repo is not None else CredentialsRepository()
    app = FastAPI(title="vault-import")
    app.state.settings = settings
    app.state.loader = UploadLoader(max_bytes=settings.max_upload_bytes)
    app.state.pipeline = pipeline if pipeline is not None else build_pipeline(settings, repo)
    app.state.reader = reader if reader is not None else CredentialReader(
        repo=repo,
        cipher=EnvelopeCipher(settings.master_password),
        cache=DecryptionCache(settings.decryption_cache_size),
    )
    app.include_router(routes.router)
    return app
