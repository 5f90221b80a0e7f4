"""State layer.

The registry owns every turtle; each turtle is the single place its status
updates are merged into a consistent snapshot.
"""
