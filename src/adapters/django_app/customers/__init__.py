"""Adapter Django do domínio de Clientes (model, mapper, repositório)."""
