"""Rotas de formulários de usuário."""
