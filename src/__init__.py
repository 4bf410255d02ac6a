"""Checkout core: resolução de clientes e ciclo de vida de pagamentos."""
