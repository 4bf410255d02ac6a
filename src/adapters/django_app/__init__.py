"""
Adapters Django: persistência (ORM), Unit of Work e eventos (Celery).
"""
