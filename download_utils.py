"""docstring download_utils.py: response helpers for archive downloads in server.py."""
import logging
import re
from urllib.parse import quote

from bottle import HTTPResponse

from gallery.archive_streamer import BuiltArchive

_NON_PRINTABLE = re.compile(r'[^\x20-\x7E]')


def ascii_filename(filename: str) -> str:
    """Printable-ASCII fallback for the plain filename= parameter."""
    name = _NON_PRINTABLE.sub('_', filename)
    return name.replace('"', '').replace('\\', '')


def content_disposition(filename: str) -> str:
    """attachment header with an ASCII name plus the RFC 5987 UTF-8 name."""
    return (
        f'attachment; filename="{ascii_filename(filename)}"; '
        f"filename*=UTF-8''{quote(filename, safe='')}"
    )


def archive_name(album_names, multi_name: str) -> str:
    """<album name>.zip when a single album went in, multi_name otherwise."""
    if len(album_names) == 1:
        return f"{album_names[0]}.zip"
    return multi_name


def stream(archive: BuiltArchive):
    """loads the stream by iterating through the archive by chunk size.
    When the client disconnects the server closes this generator, which
    removes the temporary archive."""
    try:
        for chunk in archive.iter_chunks():
            yield chunk
    except GeneratorExit:
        logging.info(f"Client disconnected, dropped archive {archive.path}")
        raise
    finally:
        archive.discard()


def archive_response(archive: BuiltArchive, filename: str) -> HTTPResponse:
    """streams a finished archive as an attachment, never cached."""
    r = HTTPResponse(body=stream(archive))
    r.set_header('Content-Type', 'application/octet-stream')
    r.set_header('Content-Transfer-Encoding', 'binary')
    r.set_header('Content-Disposition', content_disposition(filename))
    r.set_header('Content-Length', str(archive.size))
    r.set_header('Cache-Control', 'no-cache, no-store, must-revalidate')
    r.set_header('Pragma', 'no-cache')
    r.set_header('Expires', '0')
    r.set_header('X-Accel-Buffering', 'no')
    return r
