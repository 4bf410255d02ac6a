"""Adapter Django do domínio de Pagamentos (model, mapper, repositório, agendador)."""
