"""
Songbook - Song catalog manager.

A small FastAPI application to list, create, edit and delete songs through
HTML forms, backed by an embedded SQLite database.
"""
