# Services package init
"""
Notekeeper Backend: Services Layer
===================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - CredentialService: bcrypt password hashing, JWT issue/verify
    - UserService: signup, login, account deletion
    - NoteService: per-user note CRUD, pin, archive

Each module exposes a stateless singleton (`credential_service`,
`user_service`, `note_service`); sessions and user ids are passed per call.
"""
