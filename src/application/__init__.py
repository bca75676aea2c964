"""Application layer - use cases and orchestration.

Structure:
- services/: FormInstanceService (lifecycle), FormSubmissionService
  (event publication), DualStoreSynchronizer (partitioned writes)

The application layer orchestrates domain logic but contains no business rules.
"""
