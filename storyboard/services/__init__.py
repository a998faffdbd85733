"""
Storyboard Backend — Services Layer
====================================

What:  Business rules between the routes (HTTP) and the database.

Service Inventory:
    - PartService: ordered part store (list, create, update, delete, reorder)
    - FileService: upload validation, storage and cleanup
    - AuthService: single-account login backed by the session cookie

Each module exposes a singleton (`part_service`, `file_service`,
`auth_service`) that routes import directly.
"""
