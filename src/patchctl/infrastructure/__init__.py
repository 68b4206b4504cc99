"""Infrastructure layer: the ``cargo metadata`` subprocess adapter.

This layer depends on stdlib only.
It must never import from domain, services, commands, or output.
The service layer bridges between raw metadata and domain models.
"""
