# Routes package init
"""
DayNotes Backend — API Routes Package
======================================

Route Inventory:
    - notes.py:   /notes/day|week|month/{date}, /notes/{date}/{time}
    - health.py:  GET /health

Routes are thin: they pull parameters off the request, call
NoteRepository, and return the result. Status codes for failures come from
the exception handlers in main.py.
"""
