"""Tests for UploadCoordinator class."""

import pytest

from gallery.errors import AlbumNotFound, IOFailure
from gallery.upload_coordinator import UploadedFile, UploadCoordinator


class TestIngest:
    """Tests for ingesting batches."""

    def test_example_batch(self, coordinator, sample_image_bytes):
        """Test the light/max/unknown batch yields two photos and one failure."""
        files = [
            UploadedFile('a_light_1.jpg', 'image/jpeg', sample_image_bytes),
            UploadedFile('max/b.jpg', 'image/jpeg', sample_image_bytes),
            UploadedFile('c.jpg', 'image/jpeg', sample_image_bytes),
        ]

        result = coordinator.ingest(None, 'Test', files)

        assert [p.tier for p in result.accepted] == ['light', 'max']
        assert len(result.failures) == 1
        assert result.failures[0].filename == 'c.jpg'
        assert result.failures[0].reason == 'UnclassifiableTier'
        album = coordinator.registry.get(result.album_id)
        assert album.name == 'Test'
        assert album.photo_count == 2

    def test_photo_record(self, coordinator, wide_image_bytes):
        """Test the stored record carries dimensions, paths and size."""
        result = coordinator.ingest(
            None, 'Test', [UploadedFile('light/wide.jpg', 'image/jpeg', wide_image_bytes)]
        )

        photo = result.accepted[0]
        assert photo.width == 200
        assert photo.height == 100
        assert photo.stored_path == f'{result.album_id}/light/wide.jpg'
        assert photo.thumbnail_path == f'{result.album_id}/wide_light.jpg'
        assert photo.size == len(wide_image_bytes)
        assert photo.content_type == 'image/jpeg'
        assert coordinator.store.read(photo.stored_path) == wide_image_bytes
        assert coordinator.store.thumbnail_exists(photo.thumbnail_path)

    def test_subsequent_batches_append(self, coordinator, sample_image_bytes):
        """Test later batches add to the album and never replace it."""
        first = coordinator.ingest(
            None, 'Test', [UploadedFile('light/a.jpg', 'image/jpeg', sample_image_bytes)]
        )
        second = coordinator.ingest(
            first.album_id, None, [UploadedFile('light/a.jpg', 'image/jpeg', sample_image_bytes)]
        )

        album = coordinator.registry.get(first.album_id)
        assert second.album_id == first.album_id
        assert [p.stored_path.split('/')[-1] for p in album.photos] == ['a.jpg', 'a (1).jpg']

    def test_unknown_album(self, coordinator, sample_image_bytes):
        """Test batches for a missing album are refused."""
        with pytest.raises(AlbumNotFound):
            coordinator.ingest('missing', None, [UploadedFile('light/a.jpg', '', sample_image_bytes)])

    def test_new_album_with_no_accepted_files(self, coordinator, sample_image_bytes):
        """Test no album is created when nothing is accepted."""
        result = coordinator.ingest(None, 'Test', [UploadedFile('c.jpg', 'image/jpeg', sample_image_bytes)])

        assert result.album_id is None
        assert coordinator.registry.list_all() == []

    def test_stats(self, coordinator, uploaded_files):
        """Test batch statistics are filled in."""
        result = coordinator.ingest(None, 'Test', uploaded_files)

        assert result.stats.total_files == 4
        assert result.stats.accepted == 3
        assert result.stats.failed == 1
        assert result.stats.bytes_stored == sum(p.size for p in result.accepted)

    def test_batch_summary_logged(self, coordinator, uploaded_files, caplog):
        """Test the batch summary line reports counts and throughput."""
        with caplog.at_level('INFO', logger='test'):
            coordinator.ingest(None, 'Test', uploaded_files)

        summary = [r.getMessage() for r in caplog.records if r.getMessage().startswith('Batch complete')]
        assert len(summary) == 1
        assert '3 accepted, 1 failed' in summary[0]
        assert 'files/s' in summary[0]


class TestValidation:
    """Tests for per-file rejection."""

    def test_file_too_large(self, memory_registry, file_store, thumbnail_generator, sample_image_bytes):
        """Test files above the ceiling are rejected before storing."""
        coordinator = UploadCoordinator(
            memory_registry, file_store, thumbnail_generator, max_file_size=10
        )

        result = coordinator.ingest(None, 'Test', [UploadedFile('light/a.jpg', 'image/jpeg', sample_image_bytes)])

        assert result.failures[0].reason == 'FileTooLarge'
        assert file_store.list_album_ids() == []

    def test_unsupported_type(self, coordinator):
        """Test non-image data is rejected whatever its declared type."""
        result = coordinator.ingest(
            None, 'Test', [UploadedFile('light/a.jpg', 'image/jpeg', b'not really a jpeg')]
        )

        assert result.failures[0].reason == 'UnsupportedType'

    def test_disallowed_image_type(self, coordinator, image_bytes_factory):
        """Test real images outside the allow-list are rejected."""
        bmp = image_bytes_factory(fmt='BMP')

        result = coordinator.ingest(None, 'Test', [UploadedFile('light/a.bmp', 'image/bmp', bmp)])

        assert result.failures[0].reason == 'UnsupportedType'

    def test_decode_failure_stores_nothing(self, coordinator, sample_image_bytes):
        """Test a truncated image is rejected without leaving a stored file."""
        truncated = sample_image_bytes[:200]

        result = coordinator.ingest(None, 'Test', [UploadedFile('light/a.jpg', 'image/jpeg', truncated)])

        assert result.failures[0].reason in ('DecodeFailure', 'UnsupportedType')
        assert coordinator.store.list_album_ids() == []

    def test_failure_does_not_abort_batch(self, coordinator, sample_image_bytes, mocker):
        """Test an IO error on one file still lets the next one through."""
        original_store = coordinator.store.store
        calls = {'n': 0}

        def flaky_store(*args):
            calls['n'] += 1
            if calls['n'] == 1:
                raise IOFailure("Write did not complete: disk full")
            return original_store(*args)

        mocker.patch.object(coordinator.store, 'store', side_effect=flaky_store)
        files = [
            UploadedFile('light/a.jpg', 'image/jpeg', sample_image_bytes),
            UploadedFile('light/b.jpg', 'image/jpeg', sample_image_bytes),
        ]

        result = coordinator.ingest(None, 'Test', files)

        assert [f.reason for f in result.failures] == ['IOFailure']
        assert [p.original_filename for p in result.accepted] == ['light/b.jpg']

    def test_thumbnail_written_before_registry(self, coordinator, sample_image_bytes, mocker):
        """Test a thumbnail write failure leaves no registry record."""
        mocker.patch.object(
            coordinator.store, 'store_thumbnail', side_effect=IOFailure("Cannot create file")
        )

        result = coordinator.ingest(None, 'Test', [UploadedFile('max/a.jpg', 'image/jpeg', sample_image_bytes)])

        assert result.failures[0].reason == 'IOFailure'
        assert result.album_id is None
        assert coordinator.registry.list_all() == []

    def test_thumbnail_failure_leaves_orphan_and_continues(self, coordinator, sample_image_bytes, mocker):
        """Test the stored original stays on disk unregistered and the batch goes on."""
        original_store_thumbnail = coordinator.store.store_thumbnail
        calls = {'n': 0}

        def flaky_store_thumbnail(*args):
            calls['n'] += 1
            if calls['n'] == 1:
                raise IOFailure("Cannot create file: disk full")
            return original_store_thumbnail(*args)

        mocker.patch.object(coordinator.store, 'store_thumbnail', side_effect=flaky_store_thumbnail)
        files = [
            UploadedFile('light/a.jpg', 'image/jpeg', sample_image_bytes),
            UploadedFile('light/b.jpg', 'image/jpeg', sample_image_bytes),
        ]

        result = coordinator.ingest(None, 'Test', files)

        assert [f.reason for f in result.failures] == ['IOFailure']
        assert [p.original_filename for p in result.accepted] == ['light/b.jpg']
        orphan = f'{result.album_id}/light/a.jpg'
        assert coordinator.store.exists(orphan)
        registered = [p.stored_path for p in coordinator.registry.get(result.album_id).photos]
        assert orphan not in registered

    def test_registry_write_failure_does_not_abort_batch(self, coordinator, sample_image_bytes, mocker):
        """Test a failed registry save is reported per file and later files still go in."""
        backend = coordinator.registry.backend
        original_save = backend.save
        calls = {'n': 0}

        def flaky_save(data):
            calls['n'] += 1
            if calls['n'] == 2:
                raise OSError(28, 'No space left on device')
            return original_save(data)

        mocker.patch.object(backend, 'save', side_effect=flaky_save)
        files = [
            UploadedFile(f'light/p{n}.jpg', 'image/jpeg', sample_image_bytes) for n in range(3)
        ]

        result = coordinator.ingest(None, 'Test', files)

        assert [p.original_filename for p in result.accepted] == ['light/p0.jpg', 'light/p2.jpg']
        assert [(f.filename, f.reason) for f in result.failures] == [('light/p1.jpg', 'IOFailure')]
        assert 'No space left on device' in result.failures[0].message
        album = coordinator.registry.get(result.album_id)
        assert [p.filename for p in album.photos] == ['p0.jpg', 'p2.jpg']
        # stored bytes and thumbnail of the failed file remain as orphans
        assert coordinator.store.exists(f'{result.album_id}/light/p1.jpg')
        assert coordinator.store.thumbnail_exists(f'{result.album_id}/p1_light.jpg')

    def test_failure_to_dict(self, coordinator):
        """Test failures serialize for the upload response."""
        result = coordinator.ingest(None, 'Test', [UploadedFile('c.txt', 'text/plain', b'hello')])

        assert result.failures[0].to_dict() == {
            'filename': 'c.txt',
            'reason': 'UnsupportedType',
            'message': 'Unsupported MIME type: text/plain',
        }
