"""
Use Cases

Organized into domain folders:
- join_requests/: Join school request lifecycle
- tenants/: School database selection
- entities/: Generic CRUD and bulk operations

Import from subdirectories.
"""
