"""
Handlers package - Contains all Kopf event handlers.

- secret.py: Generation passes for annotated Secrets
"""
