"""Models package - Re-exports all models for convenient importing."""
from cdindex.extensions import db
from cdindex.models.moderator import Moderator
from cdindex.models.catalog import Artist, Album, Track, TARGET_MODELS
from cdindex.models.modification import Modification, Vote

__all__ = ['db', 'Moderator', 'Artist', 'Album', 'Track', 'TARGET_MODELS', 'Modification', 'Vote']
