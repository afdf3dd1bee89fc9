"""Infrastructure layer — database, repositories, graph projection.

This layer depends on stdlib, the domain layer, and third-party libs
(SQLAlchemy, NetworkX). It must never import from services, commands, or
output. The service layer bridges between domain rules and infrastructure.
"""
