"""docstring settings.py: runtime settings for server.py.
Values are read from environment variables (set in docker-compose.yml or the
uwsgi environment); the defaults suit a local development run."""
import os

from gallery.config import GalleryConfig

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'app.log')

SERVER = os.getenv('SERVER', 'wsgiref')
PORT = int(os.getenv('PORT', '8080'))
DEBUG_APP = os.getenv('DEBUG_APP', 'false').lower() in ('1', 'true', 'yes')

# request bodies above this size are spooled to disk by bottle
MEMFILE_MAX = int(os.getenv('MEMFILE_MAX', str(300 * 1024 * 1024)))

# form field carrying the file parts, as sent by the front end
UPLOAD_FIELD = 'photos'

ARCHIVE_MULTI_NAME = os.getenv('ARCHIVE_MULTI_NAME', 'gallery.zip')

# public url prefixes for stored files and thumbnails
MEDIA_URL = '/media/'
THUMB_URL = '/thumbnails/'

GALLERY = GalleryConfig.from_env()
