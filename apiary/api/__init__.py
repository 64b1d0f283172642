"""Apiary REST API package.

Exposes hives, queens and beekeepers over HTTP.

Auth:        ``Authorization: Bearer <token>`` verified by the IdentityVerifier
             configured at startup (hive and user registration endpoints)
Errors:      ``{"Error": <message>}`` with the status mapped from the failure kind
"""
