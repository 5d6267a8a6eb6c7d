"""Time & leave accounting package.

This package is organized by feature modules (timetracking, compliance,
balances, leave, ...) with repository protocols at the storage seam and
plain service classes holding the business rules.
"""
