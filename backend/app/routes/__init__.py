# Routes package init
"""
Selah Backend — API Routes Package
===================================

What:  HTTP route handlers. Each module owns one resource family and
       exposes a module-level `router` that main.create_app() mounts.

Route Inventory:
    - health.py:       GET  /health
    - bible.py:        /api/verse-of-day, /api/bible/...
    - highlights.py:   /api/highlights, /api/saved-verses
    - notes.py:        /api/notes (study notes)
    - hymns.py:        /api/hymns, /api/saved-hymns, /api/playlists
    - livestreams.py:  /api/livestreams/..., /api/livestream-notes/{id}
    - references.py:   POST /api/references/extract
    - library.py:      /api/devotional-books, /api/devotional-chapters,
                       /api/book-progress, /api/book-highlights,
                       /api/devotionals/today
    - gutenberg.py:    /api/gutenberg/search, /api/gutenberg/import
    - preferences.py:  /api/preferences

Routes stay thin: parse the request, resolve the caller through
app.dependencies, call a service, shape the response. Business rules and
ownership scoping live in the services.
"""
