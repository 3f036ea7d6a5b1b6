"""Domain layer for the accounts bounded context.

Contains the User aggregate, its component objects (ledger, inventory,
bid roster), value objects, and invariant errors. The domain layer has no
dependencies on infrastructure or application code.
"""
