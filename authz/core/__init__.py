"""
Core infrastructure: configuration, database, errors, logging and FastAPI helpers.
"""
