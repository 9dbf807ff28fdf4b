# Companion package init
"""
Selah Backend — Livestream Companion Client
============================================

What:  Python side of the livestream page: an httpx client for the
       livestream endpoints and the playback position tracker that drives
       it while a stream plays.
Who:   Embedding players (desktop kiosks, recorders) and the test suite.
"""

from app.companion.client import CompanionClient
from app.companion.position_tracker import Player, PositionTracker

__all__ = ["CompanionClient", "Player", "PositionTracker"]
