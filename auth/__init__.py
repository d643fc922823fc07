"""auth/ -- Authentication and session package for Intrevue.

Layer rule: auth/ imports only stdlib + third-party libraries, core/ and
docstore/. It does NOT import from api/ or records/.
api/ imports from auth/, not the other way around.
"""
