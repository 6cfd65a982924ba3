"""
PATH: batches/domain/__init__.py

Plain (non-ORM) value types returned by the batch engine.
"""
