"""
NoteShare Backend — Services Layer
====================================

Business logic between the routes (HTTP) and the database/blob store.

Service Inventory:
    - blob_store.py:       BlobStore, storage keys
    - profile_service.py:  ensure_profile on a principal's first write
    - taxonomy_service.py: subject/professor choices and quick-add
    - note_service.py:     submission, listing, filter, delete
    - rating_service.py:   detail view, rating upsert, download

Services take the request's AsyncSession and Principal as arguments and
never commit; the session dependency commits or rolls back per request.
"""
