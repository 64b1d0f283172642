"""Apiary domain services.

Provides:
- ownership:  OwnershipGuard - a hive is only accessible to its creator
- assignment: AssignmentCoordinator - transactional Hive↔Queen links and cascading deletes
- listing:    PaginatedLister - cursor-paginated pages with ``next`` links
- hives, queens, beekeepers: record CRUD on top of the entity stores
"""
