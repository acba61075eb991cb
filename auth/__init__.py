"""auth/ -- Authentication and authorization package for Armory.

Layer rule: auth/ imports only core/ + third-party libraries (FastAPI only in
dependencies.py). It does NOT import from api/ or inventory/.
api/ imports from auth/, not the other way around.
"""
