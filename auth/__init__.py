"""auth/ -- Credential payloads, the Auth Backend seam, and screen controllers.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or cache/.
api/ imports from auth/, not the other way around.
"""
