"""
static-upload

Uploads built static assets to a Google Cloud Storage bucket. JavaScript and
CSS files are renamed with a content hash so they can be cached for a year,
files already in the bucket are skipped, and a manifest maps every local
filename to its public URL.

Subpackages:
- versioning: content fingerprints and versioned filenames
- uploader: storage access, URL resolution and the batch upload
- manifest: JSON/CSV manifest output
- utils: logging, configuration, errors, metrics
"""

__version__ = "0.2.0"
