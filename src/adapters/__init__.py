"""
Adapters - infrastructure side of the hexagon (Django, Celery).
"""
