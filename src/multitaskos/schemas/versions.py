"""Schema version constants for persisted objects.

Centralizing version numbers keeps migrations predictable and avoids
per-file drift when we extend the data model.
"""

# Blobs written before the version field existed carry no schemaVersion.
LEGACY_STATE_VERSION = 0
STATE_VERSION = 1
LOCAL_RECORD_VERSION = 1
REMOTE_DOCUMENT_VERSION = 1
