# Services package init
"""
Selah Backend — Services Layer
===============================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless classes with a module-level singleton each; every method
       takes the AsyncSession as its first argument and the caller's user
       id where rows are owned. Routes own the transaction boundary
       through get_db_session.

Service Inventory:
    - reference_extractor: Bible reference detection in free text (pure)
    - media:               livestream source type detection and embed URLs (pure)
    - BibleService:        verses, chapter counts, search, verse of the day
    - HighlightService:    verse highlights and saved verses
    - NoteService:         study notes
    - HymnService:         hymnal, saved hymns, playlists
    - LivestreamService:   livestreams, timestamped notes, detected verses/hymns
    - LLMService (abstract) / GeminiService: text generation with retry
                           and circuit breaker
    - AnnotationService:   transcript → detected verses/hymns via the LLM
    - LibraryService:      devotional books, progress, highlights, daily devotional
    - GutenbergService:    public domain catalog search and import
    - PreferencesService:  per-user reading preferences
    - IdentityService:     bearer token verification against the auth provider
"""
