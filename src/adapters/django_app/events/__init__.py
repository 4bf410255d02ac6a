"""Event Store, publicadores e handlers Celery dos eventos de domínio."""
