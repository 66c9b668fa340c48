"""Collaborator services used by the card renderer."""  # noqa: N999
