# Services package init
"""
DayNotes Backend — Services Layer
==================================

Service Inventory:
    - validators.py:      date/time validation, note text sanitization
    - date_ranges.py:     week and month boundaries
    - note_repository.py: NoteRepository, (date, time) ↔ store paths and
                          day/week/month range queries
"""
