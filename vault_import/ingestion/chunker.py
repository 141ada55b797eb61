from vault_import.ingestion.models import Chunk
from vault_import.logging.logger import Log

DEFAULT_MAX_CHUNK_CHARS = 6000


def split_into_chunks(text: str, max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS) -> list[Chunk]:
    """Split *text* on line boundaries into chunks of at most *max_chunk_chars*.

    A line longer than the bound is never split; it becomes its own chunk.
    Bounds below one are treated as one.
    Joining the chunk texts with ``"\\n"`` reproduces *text* exactly.
    """
    max_chunk_chars = max(1, max_chunk_chars)
    if not text:
        return []

    chunks: list[Chunk] = []
    current: list[str] = []
    current_length = 0

    for line in text.split("\n"):
        if current and current_length + len(line) + 1 > max_chunk_chars:
            chunks.append(_make_chunk(len(chunks), current))
            current = []
            current_length = 0
        current.append(line)
        current_length += len(line) + 1

    if current:
        chunks.append(_make_chunk(len(chunks), current))

    Log.debug(f"Split {len(text)} chars into {len(chunks)} chunks (max {max_chunk_chars})")
    return chunks


def _make_chunk(index: int, lines: list[str]) -> Chunk:
    body = "\n".join(lines)
    return Chunk(sequence_index=index, text=body, size_chars=len(body))
