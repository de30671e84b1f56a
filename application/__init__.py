"""
Application layer for the training core.

- ports/: Protocol interfaces for the record store, device store,
  capability resolver and training log writer
- use_cases/: Server-side orchestration (assignment, templates, logging)
- exceptions.py: Error taxonomy shared by every layer
"""
