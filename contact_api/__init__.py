"""
Contact relay backend for the Topea website.

Import the application from ``contact_api.main``; this file stays minimal
to prevent import cycles.
"""
