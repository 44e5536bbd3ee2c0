"""Domain Layer: collaborator contracts and plain value objects.

Nothing here talks to docker, the terminal or the filesystem.
"""
