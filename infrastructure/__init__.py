"""
Infrastructure Package
======================

Cross-cutting collaborators shared by the marketplace domain services.

Modules:
    - events: Event bus abstraction (in-memory implementation)
    - container: Service locator handing out the domain services
"""
