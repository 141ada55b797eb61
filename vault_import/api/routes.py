"""HTTP routes for credential import and listing.

Dependencies are resolved from ``app.state`` (populated by ``create_app``) so
tests can swap in fakes without touching module globals.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Form, Header, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from vault_import.ingestion.exceptions import (
    EmptyInputError,
    FileTooLargeError,
    NoCredentialsFoundError,
    UnsupportedFileTypeError,
)
from vault_import.ingestion.models import ImportResult, ProgressEvent, RawContent
from vault_import.ingestion.pipeline import NO_CREDENTIALS_MESSAGE, ImportPipeline
from vault_import.ingestion.progress import stream_frames
from vault_import.ingestion.reader import CredentialReader
from vault_import.ingestion.upload_loader import UploadLoader
from vault_import.logging.logger import Log

router = APIRouter()

_SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}
_UPLOAD_CHUNK_SIZE = 64 * 1024


def _get_pipeline(request: Request) -> ImportPipeline:
    return request.app.state.pipeline


def _get_reader(request: Request) -> CredentialReader:
    return request.app.state.reader


def _get_loader(request: Request) -> UploadLoader:
    return request.app.state.loader


def _get_owner_id(request: Request) -> str:
    header = request.app.state.settings.identity_header
    owner_id = (request.headers.get(header) or "").strip()
    if not owner_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return owner_id


PipelineDep = Annotated[ImportPipeline, Depends(_get_pipeline)]
ReaderDep = Annotated[CredentialReader, Depends(_get_reader)]
LoaderDep = Annotated[UploadLoader, Depends(_get_loader)]
OwnerDep = Annotated[str, Depends(_get_owner_id)]


@router.post("/import", summary="Import credentials from an uploaded document")
async def import_credentials(
    file: UploadFile,
    owner_id: OwnerDep,
    pipeline: PipelineDep,
    loader: LoaderDep,
    file_type: Annotated[str | None, Form(alias="fileType")] = None,
    accept: Annotated[str | None, Header()] = None,
) -> Any:
    """Run an import; stream progress frames when the client accepts event-stream."""
    data = await _read_upload(file, loader)
    raw = _load_upload(loader, file.filename or "upload", data, file_type)
    Log.info(f"Import upload {raw.file_name!r} ({len(data)} bytes) as {raw.source_kind}")

    if accept and "text/event-stream" in accept:
        frames = stream_frames(
            lambda publish: pipeline.run(raw.text, raw.source_kind, owner_id, publish),
            thread_name=f"import-{owner_id}",
        )
        return StreamingResponse(frames, media_type="text/event-stream", headers=_SSE_HEADERS)

    events: list[ProgressEvent] = []
    try:
        await run_in_threadpool(pipeline.run, raw.text, raw.source_kind, owner_id, events.append)
    except NoCredentialsFoundError:
        return {
            "success": False,
            "message": NO_CREDENTIALS_MESSAGE,
            "result": ImportResult().to_dict(),
        }
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Internal Error: {exc}") from exc

    return {"success": True, **events[-1].payload}


@router.get("/credentials", summary="List the caller's credentials")
def list_credentials(
    owner_id: OwnerDep,
    reader: ReaderDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    search: str = "",
) -> dict[str, Any]:
    return reader.list_page(owner_id, page=page, limit=limit, search=search).to_dict()


async def _read_upload(file: UploadFile, loader: UploadLoader) -> bytes:
    """Read the upload in bounded pieces, rejecting it once it passes the size limit."""
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        try:
            loader.check_size(total_size)
        except FileTooLargeError as exc:
            raise HTTPException(status_code=413, detail=str(exc)) from exc
        chunks.append(chunk)
    return b"".join(chunks)


def _load_upload(
    loader: UploadLoader,
    file_name: str,
    data: bytes,
    file_type: str | None,
) -> RawContent:
    try:
        return loader.load(file_name, data, file_type)
    except EmptyInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except UnsupportedFileTypeError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc
