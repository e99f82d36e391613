"""
Permission domain: aggregates, condition matching, RBAC/ABAC evaluation and the domain service.
"""
