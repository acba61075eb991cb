"""inventory/ -- Asset records and their base-scoped repository.

Layer rule: inventory/ may import from core/ and auth/ (for the User type and
the access policy). It does NOT import from api/.
"""
