"""
adr-spine - Architecture Decision Record lifecycle management.

Creates, promotes, deprecates and supersedes decision documents stored as
Markdown files in status-named directories, keeps a generated index and
enforces referential and metadata integrity.

- adrspine.core: Domain model, Document Store, Lifecycle Engine, Validator
- adrspine.ops: Operation functions returning OperationResult
- adrspine.cli: The ``adr`` command
"""

__version__ = "0.1.0"
