"""
Core Domain Layer - the hexagon.

Pure business logic, free of frameworks:
- No Django, Celery or database imports
- Fully testable without a database
- Infrastructure-agnostic
"""
