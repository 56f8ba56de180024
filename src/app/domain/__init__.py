"""Modelos de domínio do pipeline (eventos, receipts e documentos canônicos)."""
