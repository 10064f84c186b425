"""
Persistence functions for the OpNotes models.
"""
