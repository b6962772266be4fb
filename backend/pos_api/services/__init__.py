"""
Service layer.

- maintenance: snapshot export/restore and resets
- backup: backup records and their files
"""
