"""
Pytest fixtures for gallery tests.
"""

import io

import pytest


def make_image_bytes(size=(100, 100), fmt='JPEG', mode='RGB', color='red'):
    """Encode a solid-colour test image."""
    from PIL import Image

    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes_factory():
    """Fixture providing the test image encoder."""
    return make_image_bytes


@pytest.fixture
def sample_image_bytes():
    """Fixture providing sample JPEG image bytes."""
    return make_image_bytes()


@pytest.fixture
def sample_png_bytes():
    """Fixture providing sample PNG image bytes with transparency."""
    return make_image_bytes(fmt='PNG', mode='RGBA', color=(255, 0, 0, 128))


@pytest.fixture
def wide_image_bytes():
    """Fixture providing a 200x100 JPEG."""
    return make_image_bytes(size=(200, 100), color='blue')


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')


@pytest.fixture
def memory_registry(logger):
    """Fixture providing a registry backed by process memory."""
    from gallery.album_registry import AlbumRegistry
    from gallery.registry_backends import MemoryBackend

    return AlbumRegistry(MemoryBackend(), logger)


@pytest.fixture
def file_store(tmp_path, logger):
    """Fixture providing a FileStore under a temporary directory."""
    from gallery.file_store import FileStore

    return FileStore(str(tmp_path / 'albums'), str(tmp_path / 'thumbnails'), logger)


@pytest.fixture
def thumbnail_generator(logger):
    """Fixture providing a small-thumbnail generator."""
    from gallery.thumbnail_generator import ThumbnailGenerator

    return ThumbnailGenerator(size=64, quality=80, logger=logger)


@pytest.fixture
def coordinator(memory_registry, file_store, thumbnail_generator, logger):
    """Fixture providing an UploadCoordinator wired to temporary storage."""
    from gallery.upload_coordinator import UploadCoordinator

    return UploadCoordinator(
        memory_registry,
        file_store,
        thumbnail_generator,
        max_file_size=1024 * 1024,
        logger=logger,
    )


@pytest.fixture
def streamer(memory_registry, file_store, tmp_path, logger):
    """Fixture providing an ArchiveStreamer with small chunks."""
    from gallery.archive_streamer import ArchiveStreamer

    return ArchiveStreamer(
        memory_registry,
        file_store,
        tmp_dir=str(tmp_path / 'tmp'),
        chunk_size=1024,
        logger=logger,
    )


@pytest.fixture
def uploaded_files(sample_image_bytes, sample_png_bytes):
    """Fixture providing a batch with two light, one max and one unclassifiable file."""
    from gallery.upload_coordinator import UploadedFile

    return [
        UploadedFile('light/one.jpg', 'image/jpeg', sample_image_bytes),
        UploadedFile('light/two.png', 'image/png', sample_png_bytes),
        UploadedFile('Party__max_0001.jpg', 'image/jpeg', sample_image_bytes),
        UploadedFile('plain.jpg', 'image/jpeg', sample_image_bytes),
    ]


@pytest.fixture
def populated_album(coordinator, uploaded_files):
    """Fixture providing the id of an album holding three photos."""
    result = coordinator.ingest(None, 'Summer Party', uploaded_files)
    return result.album_id


@pytest.fixture
def sample_album():
    """Fixture providing an Album record with one photo per tier."""
    from gallery.album_record import Album, Photo

    album = Album(id='album-1', name='Wedding', created_at='2026-01-01T00:00:00')
    album.photos.append(Photo(
        id='p1',
        original_filename='light/a.jpg',
        tier='light',
        stored_path='album-1/light/a.jpg',
        width=1800,
        height=1200,
        thumbnail_path='album-1/a_light.jpg',
        size=2048,
        content_type='image/jpeg',
        uploaded_at='2026-01-01T00:00:00',
    ))
    album.photos.append(Photo(
        id='p2',
        original_filename='max/a.jpg',
        tier='max',
        stored_path='album-1/max/a.jpg',
        width=6000,
        height=4000,
        thumbnail_path='album-1/a_max.jpg',
        size=4096,
        content_type='image/jpeg',
        uploaded_at='2026-01-01T00:00:00',
    ))
    return album
