"""API — camada de borda do intake-core.

Responsabilidades:
- Receber formulários e webhooks (Cal.com, Stripe)
- Verificar assinaturas sobre o corpo bruto
- Normalizar payloads externos para NormalizedEvent

Subpastas:
- connectors/: verificação de assinatura e parsing seguro de webhooks
- normalizers/: conversão de payloads externos → modelos internos
- routes/: endpoints HTTP (webhooks, formulários, leitura, health)

NÃO PODE conter: FSM, escrita durável, orquestração de use cases.
"""
