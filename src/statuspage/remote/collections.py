"""Firestore collection names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when the first document is written, so these constants are the single
source of truth for the remote layout.
"""

COLLECTION_META = "status_meta"
COLLECTION_USERS = "status_users"
COLLECTION_PROJECTS = "status_projects"
COLLECTION_PUBLIC_PROJECTS = "status_public_projects"
COLLECTION_AUDIT = "status_audit"

META_DOCUMENT_ID = "main"

REMOTE_SCHEMA_VERSION = 1
