"""docstore/ -- Document database access for Intrevue.

Wraps the managed document store (Cloud Firestore) behind a small
collection/document/query contract so the rest of the system never touches
the SDK directly.

Layer rule: docstore/ imports only stdlib + third-party libraries.
It does NOT import from api/, auth/, or records/.
"""
