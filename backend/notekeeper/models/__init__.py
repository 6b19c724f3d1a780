# Models package init
"""
Importing the package registers both tables on Base.metadata, so the
User <-> Note relationship can resolve no matter which model is used first.
"""

from notekeeper.models.user import User
from notekeeper.models.note import Note, NoteStatus

__all__ = ["User", "Note", "NoteStatus"]
