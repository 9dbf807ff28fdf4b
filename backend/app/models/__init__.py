"""
ORM model registry.

Importing this package registers every table on `Base.metadata`, which is what
Alembic autogenerate and the test suite's `create_all` rely on.
"""

from app.models.bible import BibleVerse, Highlight, SavedVerse, StudyNote
from app.models.hymn import Hymn, Playlist, PlaylistItem, SavedHymn
from app.models.library import (
    BookHighlight,
    BookProgress,
    DailyDevotional,
    DevotionalBook,
    DevotionalChapter,
    UserPreferences,
)
from app.models.livestream import (
    DetectedHymn,
    DetectedVerse,
    Livestream,
    LivestreamNote,
    Transcript,
    TranscriptSegment,
)

__all__ = [
    "BibleVerse",
    "BookHighlight",
    "BookProgress",
    "DailyDevotional",
    "DetectedHymn",
    "DetectedVerse",
    "DevotionalBook",
    "DevotionalChapter",
    "Highlight",
    "Hymn",
    "Livestream",
    "LivestreamNote",
    "Playlist",
    "PlaylistItem",
    "SavedHymn",
    "SavedVerse",
    "StudyNote",
    "Transcript",
    "TranscriptSegment",
    "UserPreferences",
]
