"""Rotas de webhooks assinados (Cal.com e Stripe)."""
