"""Componentes Django compartilhados: Unit of Work e repositório base."""
