"""records/ -- Interview and feedback record access.

Read-only queries over the interviews and feedback collections, plus the
feedback-generation request against the scoring model.

Layer rule: records/ may import from core/ and docstore/. It does NOT import
from api/ or auth/.
"""
