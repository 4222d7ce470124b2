"""
Clarity
=======

Sorts the files of a folder into category folders by extension.

Features:
- Named categories of file extensions, stored as editable YAML
- Non-destructive preview of how a folder would be organized
- Moves restricted to approved destination folders, never overwriting

The desktop front end calls the four operations of ``OrganizerService``.
"""

__version__ = "0.1.0"
