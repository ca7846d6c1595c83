# gltfdata/uri_io.py

import base64
import logging
import os
from pathlib import Path
from typing import BinaryIO, Callable, Optional, Union
from urllib.parse import unquote_to_bytes, urljoin, urlparse
from urllib.request import url2pathname, urlopen

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


def to_uri(location: Union[str, Path]) -> str:
    """URI string for a file path or URI"""
    if isinstance(location, Path):
        return location.resolve().as_uri()
    parsed = urlparse(location)
    # Single letters are Windows drive letters, not schemes
    if len(parsed.scheme) > 1:
        return location
    return Path(location).resolve().as_uri()


def is_data_uri(uri: str) -> bool:
    return uri[:5].lower() == 'data:'


def get_parent(uri: str) -> str:
    if is_data_uri(uri):
        return uri
    if urlparse(uri).path.endswith('/'):
        return urljoin(uri, '..')
    return urljoin(uri, '.')


def make_absolute(base_uri: str, uri_string: str) -> str:
    if is_data_uri(uri_string) or len(urlparse(uri_string).scheme) > 1:
        return uri_string
    return urljoin(base_uri, uri_string)


def read_data_uri(uri: str) -> bytes:
    header, separator, payload = uri.partition(',')
    if not separator:
        raise ValueError(f"Invalid data URI: {uri[:64]}")
    if header.lower().endswith(';base64'):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


def data_uri_mime_type(uri: str) -> Optional[str]:
    header = uri.partition(',')[0][5:]
    mime_type = header.split(';')[0]
    return mime_type or None


def describe(uri: str) -> str:
    """Short description of a URI for log messages"""
    if is_data_uri(uri):
        return "data URI"
    return uri.rstrip('/').rsplit('/', 1)[-1]


def _open(uri: str):
    parsed = urlparse(uri)
    if parsed.scheme == 'file':
        path = url2pathname(parsed.path)
        return open(path, 'rb'), os.path.getsize(path)
    response = urlopen(uri)
    length = response.headers.get('Content-Length')
    return response, int(length) if length else -1


def read_stream(stream: BinaryIO, content_length: int = -1,
                progress_callback: Optional[ProgressCallback] = None,
                chunk_size: int = 8192) -> bytes:
    """Read a stream completely, reporting the fraction of bytes read.

    The callback receives -1 when the total size is unknown, and once more
    when reading is complete.
    """
    chunks = []
    total = 0
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        chunks.append(chunk)
        total += len(chunk)
        if progress_callback is not None:
            if content_length > 0 and total < content_length:
                progress_callback(total / content_length)
            else:
                progress_callback(-1.0)
    if progress_callback is not None:
        progress_callback(-1.0)
    return b"".join(chunks)


def read_uri(uri: str, progress_callback: Optional[ProgressCallback] = None,
             chunk_size: int = 8192) -> bytes:
    """Read all bytes from a file, HTTP(S) or data URI"""
    if is_data_uri(uri):
        return read_data_uri(uri)
    stream, content_length = _open(uri)
    with stream:
        return read_stream(stream, content_length, progress_callback, chunk_size)


def create_base_uri_resolver(base_uri: str) -> Callable[[str], Optional[bytes]]:
    """Resolver that reads URIs relative to base_uri.

    Returns None, after logging a warning, when the data cannot be read.
    """
    def resolve(uri_string: str) -> Optional[bytes]:
        try:
            return read_uri(make_absolute(base_uri, uri_string))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read data for URI {describe(uri_string)}: {e}")
            return None
    return resolve
