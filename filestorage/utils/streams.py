"""
Byte stream helpers.

The façade speaks ``AsyncIterator[bytes]`` to adapters. Anything callers
hand to ``write`` is converted with ``to_byte_stream`` and released with
``close_stream`` once the adapter is done with it.
"""
import base64
import hashlib
import inspect
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Union

# 64KB, same as the local adapter's disk chunk size
CHUNK_SIZE = 64 * 1024

FileContents = Union[str, bytes, bytearray, memoryview, Iterable[bytes], AsyncIterable[bytes], Any]


def _as_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


async def to_byte_stream(contents: FileContents, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """
    Convert any supported content shape into an async byte stream.

    Supported shapes:
    - str (encoded as UTF-8) and bytes-like objects
    - async iterables of bytes (e.g. async generators, aiofiles handles)
    - sync iterables of bytes
    - binary file objects exposing ``read(size)`` (sync or async)
    """
    if isinstance(contents, (str, bytes, bytearray, memoryview)):
        data = _as_bytes(contents)
        for offset in range(0, len(data), chunk_size):
            yield data[offset:offset + chunk_size]
        return

    if hasattr(contents, "read"):
        while True:
            chunk = contents.read(chunk_size)
            if inspect.isawaitable(chunk):
                chunk = await chunk
            if not chunk:
                break
            yield _as_bytes(chunk)
        return

    if hasattr(contents, "__aiter__"):
        async for chunk in contents:
            yield _as_bytes(chunk)
        return

    if hasattr(contents, "__iter__"):
        for chunk in contents:
            yield _as_bytes(chunk)
        return

    raise TypeError(f"Unsupported file contents of type {type(contents).__name__}")


async def close_stream(stream: Any) -> None:
    """Release a stream (async generator, file object, ...) if it can be closed."""
    if isinstance(stream, (str, bytes, bytearray, memoryview)):
        return

    if hasattr(stream, "aclose"):
        await stream.aclose()
        return

    close = getattr(stream, "close", None)
    if close is None:
        return

    if getattr(stream, "closed", False) is True:
        return

    result = close()
    if inspect.isawaitable(result):
        await result


async def read_to_bytes(stream: AsyncIterable[bytes]) -> bytes:
    """Drain an async byte stream into a single bytes object."""
    parts = []
    async for chunk in stream:
        parts.append(chunk)
    return b"".join(parts)


async def read_to_string(stream: AsyncIterable[bytes], encoding: str = "utf-8") -> str:
    return (await read_to_bytes(stream)).decode(encoding)


async def checksum_from_stream(
    stream: AsyncIterable[bytes],
    algo: str | None = None,
    encoding: str | None = None,
) -> str:
    """
    Compute a checksum by streaming all bytes through ``hashlib``.

    Args:
        stream: Async byte stream
        algo: Any ``hashlib.new`` algorithm name (default: md5)
        encoding: "hex" (default) or "base64"

    Returns:
        Encoded digest
    """
    digest = hashlib.new(algo or "md5")

    async for chunk in stream:
        digest.update(chunk)

    if (encoding or "hex") == "base64":
        return base64.b64encode(digest.digest()).decode("ascii")

    return digest.hexdigest()
