"""Service layer — file-driven validation returning ServiceResult.

Services may import from domain, engine and plugins.
They must never import from commands or output.
"""
