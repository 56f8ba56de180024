"""Rotas de leitura dos documentos canônicos."""
