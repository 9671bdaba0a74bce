#!/usr/bin/env python3

import json
import logging
from functools import wraps

from bottle import Bottle
from bottle import (
    Response, BaseRequest, HTTPResponse, request, response, static_file)

import settings
from download_utils import archive_name, archive_response
from gallery.errors import (
    AlbumNotFound, ArchiveBuildFailure, EmptyArchive, PhotoNotFound)
from gallery.services import GalleryServices
from gallery.upload_coordinator import UploadedFile

# Configure logging
level = logging.getLevelName(settings.LOG_LEVEL)
logging.basicConfig(filename=settings.LOG_FILE or None, level=level)

BaseRequest.MEMFILE_MAX = settings.MEMFILE_MAX


def log(msg):
    logging.debug(msg)


def allow_cross_origin(func):
    """Decorate a view function to allow cross domain access."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except HTTPResponse as r:
            r.set_header('Access-Control-Allow-Origin', '*')
            raise
        (result if isinstance(result, Response) else response) \
            .set_header('Access-Control-Allow-Origin', '*')
        return result
    return wrapper


def json_response(payload, status=200):
    return HTTPResponse(
        body=json.dumps(payload, ensure_ascii=False),
        status=status,
        headers={'Content-Type': 'application/json; charset=utf-8'},
    )


def json_error(status, message):
    log(f"{status}: {message}")
    return json_response({'error': message}, status)


def photo_json(photo):
    """Photo record plus public urls for the front end."""
    data = photo.to_dict()
    data['src'] = settings.MEDIA_URL + photo.stored_path
    data['thumbnail'] = settings.THUMB_URL + photo.thumbnail_path
    return data


def album_json(album, with_photos=True):
    data = {
        'id': album.id,
        'name': album.name,
        'createdAt': album.created_at,
        'photoCount': album.photo_count,
        'tierCounts': album.tier_counts(),
    }
    if album.photos:
        data['cover'] = settings.THUMB_URL + album.photos[0].thumbnail_path
    if with_photos:
        data['photos'] = [photo_json(p) for p in album.photos]
    return data


def read_uploads(max_file_size):
    """Turn the multipart file parts into UploadedFile records.
    Each part is read at most one byte past the size ceiling so oversized
    files are rejected without being read whole."""
    uploads = []
    for upload in request.files.getall(settings.UPLOAD_FIELD):
        data = upload.file.read(max_file_size + 1)
        uploads.append(UploadedFile(
            filename=upload.raw_filename or upload.filename,
            content_type=upload.content_type or '',
            data=data,
        ))
    return uploads


def create_app(services: GalleryServices, multi_name=settings.ARCHIVE_MULTI_NAME):
    """Build the bottle application around one set of gallery services."""
    app = Bottle()

    def ingest(album_id):
        files = read_uploads(services.config.max_file_size)
        if not files:
            return json_error(400, "No files uploaded")

        album_name = request.forms.albumName
        if album_id is None and not album_name.strip():
            return json_error(400, "Album name is required")

        log(f"Upload batch: {len(files)} file(s) for album {album_id or 'new'}")
        try:
            result = services.coordinator.ingest(album_id, album_name, files)
        except AlbumNotFound as e:
            return json_error(404, e.message)

        payload = {
            'albumId': result.album_id,
            'message': f"{len(result.accepted)} of {len(files)} photo(s) added",
            'photos': [photo_json(p) for p in result.accepted],
            'failures': [f.to_dict() for f in result.failures],
            'stats': result.stats.to_dict(),
        }
        album = services.registry.find(result.album_id) if result.album_id else None
        if album is not None:
            payload['album'] = album_json(album, with_photos=False)
        return json_response(payload)

    def build_archive(album_ids):
        try:
            archive = services.streamer.build(album_ids)
        except EmptyArchive as e:
            return json_error(404, e.message)
        except ArchiveBuildFailure as e:
            logging.error(f"Archive for {album_ids} failed: {e.message}")
            return json_error(500, e.message)
        log(f"Streaming archive {archive.path} ({archive.size} bytes)")
        return archive_response(archive, archive_name(archive.album_names, multi_name))

    @app.route('/api/<path:path>', method='OPTIONS')
    @allow_cross_origin
    def api_options(path):
        response.set_header('Access-Control-Allow-Methods', 'GET, POST, DELETE, OPTIONS')
        response.set_header('Access-Control-Allow-Headers', 'Content-Type')
        response.content_type = 'text/plain; charset=utf-8'
        return ''

    @app.route('/api/health')
    @allow_cross_origin
    def health():
        return json_response({'status': 'ok'})

    @app.route('/api/upload', method='POST')
    @allow_cross_origin
    def upload_new_album():
        """Create an album from the first batch of an upload session."""
        return ingest(None)

    @app.route('/api/albums/<album_id>/photos', method='POST')
    @allow_cross_origin
    def upload_photos(album_id):
        """Append one batch to an album; 'new' starts a new album."""
        return ingest(None if album_id == 'new' else album_id)

    @app.route('/api/albums')
    @allow_cross_origin
    def list_albums():
        albums = services.registry.list_all()
        return json_response([album_json(a, with_photos=False) for a in albums])

    @app.route('/api/albums/<album_id>')
    @allow_cross_origin
    def get_album(album_id):
        try:
            album = services.registry.get(album_id)
        except AlbumNotFound as e:
            return json_error(404, e.message)
        return json_response(album_json(album))

    @app.route('/api/albums/<album_id>', method='DELETE')
    @allow_cross_origin
    def delete_album(album_id):
        try:
            services.registry.delete_album(album_id)
        except AlbumNotFound as e:
            return json_error(404, e.message)
        services.store.remove_album(album_id)
        return json_response({'message': 'Album deleted', 'id': album_id})

    @app.route('/api/albums/<album_id>/photos/<photo_id>', method='DELETE')
    @allow_cross_origin
    def delete_photo(album_id, photo_id):
        try:
            photo = services.registry.remove(album_id, photo_id)
        except (AlbumNotFound, PhotoNotFound) as e:
            return json_error(404, e.message)
        services.store.delete(photo.stored_path)
        services.store.delete_thumbnail(photo.thumbnail_path)
        return json_response({'message': 'Photo deleted', 'id': photo_id})

    @app.route('/api/albums/<album_id>/download')
    @allow_cross_origin
    def download_album(album_id):
        if services.registry.find(album_id) is None:
            return json_error(404, f"Album not found: {album_id}")
        return build_archive([album_id])

    @app.route('/api/download-multiple', method='POST')
    @allow_cross_origin
    def download_multiple():
        payload = request.json
        album_ids = payload.get('albumIds') if isinstance(payload, dict) else None
        if not isinstance(album_ids, list) or not album_ids \
                or not all(isinstance(a, str) for a in album_ids):
            return json_error(400, "albumIds must be a non-empty list of album ids")
        return build_archive(album_ids)

    @app.route('/media/<path:path>')
    def media(path):
        """Serve stored photos."""
        return static_file(path, root=services.store.storage_root)

    @app.route('/thumbnails/<path:path>')
    def thumbnails(path):
        """Serve generated thumbnails."""
        return static_file(path, root=services.store.thumb_root, mimetype='image/jpeg')

    @app.route('/')
    def main_page():
        log("Hit root")
        return 'Gallery asset server'

    return app


app = application = create_app(GalleryServices.from_config(settings.GALLERY))


if __name__ == '__main__':
    from bottle import run
    log("running server...")

    run(app=application,
        host='0.0.0.0',
        port=settings.PORT,
        server=settings.SERVER,
        debug=settings.DEBUG_APP,
        reloader=settings.DEBUG_APP
    )

    log("Exiting.")
