"""
NoteShare Backend — API Routes Package
========================================

Route Inventory:
    - taxonomy.py:     GET  /api/taxonomy
                       POST /api/taxonomy/{subjects|professors}
    - notes.py:        GET  /api/notes
                       POST /api/notes
                       DELETE /api/notes/{id}
    - note_detail.py:  GET  /api/notes/{id}
                       GET  /api/notes/{id}/download
                       PUT  /api/notes/{id}/rating
    - auth.py:         GET  /api/auth/me
                       POST /api/auth/sign-out
    - health.py:       GET  /health

Routes are thin: they pull data out of the request, call a service, and
shape the response. Business logic lives in services.
"""
